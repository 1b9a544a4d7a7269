"""HTTP transport to a node's request/response interface.

Each call is a single ``POST {base_url}/{method}`` carrying a JSON document.
"""

import asyncio
import json
import logging
from typing import Any

import aiohttp

from nearlink.errors import NodeError, TransportError

logger = logging.getLogger(__name__)


def _error_message(payload: Any, fallback: str) -> str:
    """Pull a readable message out of a node error document."""
    if isinstance(payload, dict):
        error = payload.get("error", payload)
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)
    return fallback


class NodeConnection:
    """JSON-over-HTTP connection to a node.

    Parameters
    ----------
    base_url : str
        The node's base URL (e.g. ``http://localhost:3030``).
    timeout : float, optional
        Total timeout per request in seconds. Default is 30.
    session : aiohttp.ClientSession, optional
        Session to use. If None, one is created on first request and
        closed by ``close()``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        """The node's base URL."""
        return self._base_url

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
            self._owns_session = True
        return self._session

    async def request(self, method: str, params: dict[str, Any]) -> Any:
        """Send one request to the node.

        Parameters
        ----------
        method : str
            The RPC method name.
        params : dict[str, Any]
            The parameter document.

        Returns
        -------
        Any
            The decoded JSON reply.

        Raises
        ------
        TransportError
            If the node cannot be reached, the request times out, or the
            reply body is not JSON.
        NodeError
            If the node replies with an error status or an error document.
        """
        url = f"{self._base_url}/{method}"
        session = self._get_session()

        try:
            async with session.post(url, json=params) as response:
                status = response.status
                raw = await response.read()
        except asyncio.TimeoutError as e:
            raise TransportError(method, f"request timed out after {self._timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(method, str(e) or type(e).__name__) from e

        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            if 200 <= status < 300:
                raise TransportError(method, f"unreadable response body: {e}") from e
            raise NodeError(method, f"HTTP {status}", status=status) from e

        payload: Any = None
        decode_error: json.JSONDecodeError | None = None
        if body:
            try:
                payload = json.loads(body)
            except json.JSONDecodeError as e:
                decode_error = e

        if not 200 <= status < 300:
            message = _error_message(payload, body or f"HTTP {status}")
            raise NodeError(method, message, status=status, payload=payload)

        if decode_error is not None:
            raise TransportError(
                method, f"unreadable response body: {decode_error}"
            ) from decode_error

        if isinstance(payload, dict) and payload.get("error") is not None:
            raise NodeError(
                method,
                _error_message(payload, "node returned an error"),
                status=status,
                payload=payload,
            )

        return payload

    async def close(self) -> None:
        """Close the HTTP session if this connection created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("Node connection closed", extra={"url": self._base_url})
        self._session = None
