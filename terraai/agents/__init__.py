# terraai/agents/__init__.py
"""
Data agents and their provider services
"""

from .base import BaseAgent, AgentRegistry, agent_registry

__all__ = ["BaseAgent", "AgentRegistry", "agent_registry"]
