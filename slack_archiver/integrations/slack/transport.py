"""
Transport boundary.

The retrieval core never talks to the network directly: it hands a
SlackRequest to a transport, an async callable returning the raw response
body. Hosts may supply their own; RequestsTransport is the default.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Awaitable, Callable, Optional

import requests
from pydantic import BaseModel

from slack_archiver.config import get_settings

logger = logging.getLogger(__name__)


class SlackRequest(BaseModel):
    """Request handed to a transport."""

    url: str
    method: str
    headers: dict[str, str] = {}
    body: Optional[str] = None

    def __repr__(self) -> str:
        # Headers and body carry credentials
        return f"SlackRequest(method={self.method!r}, url={self.url!r})"

    __str__ = __repr__


Transport = Callable[[SlackRequest], Awaitable[str]]


class RequestsTransport:
    """Default transport: blocking requests calls run off the event loop."""

    def __init__(self, timeout: float = 30.0, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    async def __call__(self, request: SlackRequest) -> str:
        return await asyncio.to_thread(self._send, request)

    def _send(self, request: SlackRequest) -> str:
        logger.debug(f"Sending {request.method} {request.url}")
        response = self.session.request(
            request.method,
            request.url,
            headers=request.headers,
            data=request.body,
            timeout=self.timeout,
        )
        # Slack reports API failures in the body with ok=false, so only
        # transport-level HTTP errors are raised here
        response.raise_for_status()
        return response.text

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@lru_cache
def get_default_transport() -> RequestsTransport:
    """Process-wide transport, so retrievals share one connection pool."""
    return RequestsTransport(timeout=get_settings().request_timeout)
