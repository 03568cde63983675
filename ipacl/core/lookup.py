"""Remote address extraction for requests and raw connections."""
import ipaddress
import logging
from typing import Any, Mapping, Optional, Union

from starlette.requests import HTTPConnection

from ipacl.core.errors import AddressLookupError
from ipacl.core.validation import IPAddress

logger = logging.getLogger(__name__)


def _parse_host(host: str) -> IPAddress:
    try:
        return ipaddress.ip_address(host)
    except ValueError as e:
        raise AddressLookupError(f"allowlist: invalid remote address {host!r}") from e


def http_request_lookup(
    request: Optional[Union[HTTPConnection, Mapping[str, Any]]],
    trust_forwarded: bool = False,
) -> IPAddress:
    """Extract the client address from a request or raw ASGI scope.

    Args:
        request: Starlette request/websocket, or the ASGI scope itself
        trust_forwarded: use the first X-Forwarded-For hop when it is a
            valid IP. Only enable this behind a proxy that sets the header.

    Raises:
        AddressLookupError: no request, no client, or a non-IP client host
    """
    if request is None:
        raise AddressLookupError("allowlist: no request")
    if not isinstance(request, HTTPConnection):
        request = HTTPConnection(request)

    if trust_forwarded:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            candidate = forwarded.split(",")[0].strip()
            try:
                return ipaddress.ip_address(candidate)
            except ValueError:
                # Fall back to the socket peer
                logger.warning("Invalid IP in X-Forwarded-For: %s", candidate)

    client = request.client
    if client is None or not client.host:
        raise AddressLookupError("allowlist: no address returned")
    return _parse_host(client.host)


def net_conn_lookup(conn) -> IPAddress:
    """Extract the peer address from a socket or asyncio transport/stream writer.

    Raises:
        AddressLookupError: no connection, or no peer address on it
    """
    if conn is None:
        raise AddressLookupError("allowlist: no connection")

    if hasattr(conn, "getpeername"):
        try:
            peer = conn.getpeername()
        except OSError as e:
            raise AddressLookupError("allowlist: no address returned") from e
    elif hasattr(conn, "get_extra_info"):
        peer = conn.get_extra_info("peername")
    else:
        raise AddressLookupError(f"allowlist: unsupported connection type {type(conn).__name__}")

    if not peer:
        raise AddressLookupError("allowlist: no address returned")
    # AF_INET gives (host, port), AF_INET6 (host, port, flowinfo, scope_id)
    host = peer[0] if isinstance(peer, (tuple, list)) else peer
    if not isinstance(host, str):
        raise AddressLookupError(f"allowlist: unsupported peer address {peer!r}")
    return _parse_host(host)
