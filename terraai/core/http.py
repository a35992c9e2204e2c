# terraai/core/http.py
"""
JSON over HTTP for the provider clients.

Transport problems raise NetworkError, unreadable bodies raise
MalformedResponseError.
"""
import asyncio
import logging
import ssl
from typing import Any, Dict, Optional

import aiohttp
import certifi

from .exceptions import MalformedResponseError, NetworkError

logger = logging.getLogger(__name__)


def _ssl_context() -> ssl.SSLContext:
    return ssl.create_default_context(cafile=certifi.where())


async def request_json(
    method: str,
    url: str,
    *,
    provider: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
    timeout: float = 8.0,
    user_agent: Optional[str] = None,
) -> Any:
    """Issue one request and return the decoded JSON body."""
    headers = {"Accept": "application/json"}
    if user_agent:
        headers["User-Agent"] = user_agent

    connector = aiohttp.TCPConnector(ssl=_ssl_context(), limit=10)
    client_timeout = aiohttp.ClientTimeout(total=timeout, connect=min(timeout, 5.0))

    try:
        async with aiohttp.ClientSession(
            connector=connector,
            timeout=client_timeout,
            headers=headers
        ) as session:
            async with session.request(method, url, params=params, json=json) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise NetworkError(
                        f"{provider} answered {response.status}: {body[:200]}",
                        provider=provider,
                        status=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponseError(f"{provider} returned invalid JSON: {e}", provider=provider) from e
    except asyncio.TimeoutError as e:
        raise NetworkError(f"{provider} timed out after {timeout}s", provider=provider) from e
    except aiohttp.ClientError as e:
        raise NetworkError(f"{provider} request failed: {e}", provider=provider) from e
