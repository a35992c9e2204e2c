# terraai/agents/base.py
"""
Base agent and registry for the data agents
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

from terraai import __version__
from terraai.core.cache import ResponseCache
from terraai.core.config import Settings, get_settings
from terraai.core.exceptions import AgentError, InvalidRequestError

RequestType = TypeVar('RequestType', bound=BaseModel)
ResponseType = TypeVar('ResponseType', bound=BaseModel)


class BaseAgent(ABC, Generic[RequestType, ResponseType]):
    """
    Base class for the data agents

    An agent owns its slice of the settings, a logger named
    ``agents.<name>`` and the response cache it hands to its provider
    services. ``execute`` lets caller errors through and answers every other
    failure with ``get_fallback_response``.
    """

    def __init__(
        self,
        agent_name: str,
        cache: Optional[ResponseCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.agent_name = agent_name
        self.settings = settings or get_settings()
        self.config = self.settings.get_agent_config(agent_name)
        self.logger = logging.getLogger(f"agents.{agent_name}")

        if cache is None and self.settings.cache_enabled:
            cache = ResponseCache(ttl=self.settings.cache_ttl_seconds)
        self.cache = cache

        self._validate_config()
        self.logger.info(f"Initialized {agent_name} agent (cache={'on' if cache is not None else 'off'})")

    @abstractmethod
    def _validate_config(self) -> None:
        """Raise AgentConfigError for unusable settings"""

    @abstractmethod
    async def process_request(self, request: RequestType) -> ResponseType:
        """Produce the live response for a request"""

    @abstractmethod
    def get_fallback_response(self, request: RequestType, error: Exception) -> ResponseType:
        """Response used when process_request fails unexpectedly"""

    async def execute(self, request: RequestType) -> ResponseType:
        started = time.perf_counter()
        try:
            response = await self.process_request(request)
        except InvalidRequestError:
            raise
        except Exception as e:
            self.logger.error(f"{self.agent_name} request failed, answering with fallback: {e}", exc_info=True)
            return self._fallback(request, e)

        self.logger.info(f"{self.agent_name} request processed in {time.perf_counter() - started:.2f}s")
        return response

    def _fallback(self, request: RequestType, error: Exception) -> ResponseType:
        try:
            return self.get_fallback_response(request, error)
        except Exception as fallback_error:
            self.logger.error(f"Fallback also failed: {fallback_error}")
            raise AgentError(f"{self.agent_name} agent failed: {error}") from error

    async def health_check(self) -> Dict[str, Any]:
        """Config validity and cache state"""
        report: Dict[str, Any] = {
            "agent": self.agent_name,
            "timestamp": datetime.now().isoformat(),
            "cache_enabled": self.cache is not None,
            "cache_entries": len(self.cache) if self.cache is not None else 0,
        }
        try:
            self._validate_config()
        except Exception as e:
            report.update(status="unhealthy", config_valid=False, error=str(e))
        else:
            report.update(status="healthy", config_valid=True)
        return report

    def get_agent_info(self) -> Dict[str, Any]:
        return {
            "name": self.agent_name,
            "version": __version__,
            "config": self.config,
            "cache_enabled": self.cache is not None,
            "description": (self.__class__.__doc__ or f"{self.agent_name} agent").strip().splitlines()[0],
        }


class AgentRegistry:
    """Agents registered by name at start-up"""

    def __init__(self):
        self._agents: Dict[str, BaseAgent] = {}
        self.logger = logging.getLogger("agents.registry")

    def register(self, agent: BaseAgent) -> None:
        self._agents[agent.agent_name] = agent
        self.logger.info(f"Registered agent: {agent.agent_name}")

    def unregister(self, agent_name: str) -> None:
        if self._agents.pop(agent_name, None) is not None:
            self.logger.info(f"Unregistered agent: {agent_name}")

    def get(self, agent_name: str) -> Optional[BaseAgent]:
        return self._agents.get(agent_name)

    async def health_check_all(self) -> Dict[str, Any]:
        return {name: await agent.health_check() for name, agent in self._agents.items()}

    def get_agents_info(self) -> Dict[str, Any]:
        return {name: agent.get_agent_info() for name, agent in self._agents.items()}


# Global agent registry
agent_registry = AgentRegistry()
