"""JSON-RPC transport for the remote record store."""

import itertools
import logging
from typing import Any

import httpx

from ..records.errors import RemoteCallError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "/jsonrpc"
DEFAULT_TIMEOUT = 30.0


class JsonRpcTransport:
    """Posts ``jsonrpc: 2.0`` call envelopes to a single HTTP endpoint.

    A fresh ``httpx.AsyncClient`` is opened per call; pass ``transport`` to
    substitute the network layer (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        endpoint_path: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint_path = endpoint_path
        self.timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    def url_for(self, server_url: str) -> str:
        """Build the endpoint URL for a server address."""
        return server_url.rstrip("/") + "/" + self.endpoint_path.lstrip("/")

    async def call(
        self, server_url: str, service: str, method: str, args: list[Any]
    ) -> Any:
        """Perform one remote call and return its ``result``.

        Args:
            server_url: Base address of the server.
            service: The remote service (``common`` or ``object``).
            method: The service method (``authenticate``, ``execute_kw``...).
            args: Positional arguments for the service method.

        Returns:
            The ``result`` member of the response.

        Raises:
            TransportError: If the request fails or the body is not JSON-RPC.
            RemoteCallError: If the response carries an ``error`` member.
        """
        payload = {
            "jsonrpc": "2.0",
            "method": "call",
            "params": {"service": service, "method": method, "args": args},
            "id": next(self._ids),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.url_for(server_url),
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {server_url} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"Malformed response from {server_url}: {e}") from e

        if not isinstance(body, dict):
            raise TransportError(
                f"Expected JSON object from {server_url}, got {type(body).__name__}"
            )

        error = body.get("error")
        if error:
            raise _remote_error(error)

        return body.get("result")


def _remote_error(error: Any) -> RemoteCallError:
    """Build a RemoteCallError from a JSON-RPC ``error`` member."""
    if not isinstance(error, dict):
        return RemoteCallError(str(error))

    data = error.get("data")
    message = None
    if isinstance(data, dict):
        message = data.get("message")
    message = message or error.get("message") or "Remote call failed"
    return RemoteCallError(message, code=error.get("code"), data=data)


async def authenticate(
    transport: JsonRpcTransport,
    server_url: str,
    database: str,
    username: str,
    password: str,
) -> int | None:
    """Authenticate against the ``common`` service.

    Returns:
        The numeric user identity, or None if authentication failed.
    """
    try:
        uid = await transport.call(
            server_url, "common", "authenticate", [database, username, password, {}]
        )
    except (RemoteCallError, TransportError) as e:
        logger.error("Authentication error: %s", e)
        return None

    if not uid or isinstance(uid, bool) or not isinstance(uid, int):
        logger.warning("Authentication rejected for %s@%s", username, database)
        return None
    return uid
