"""ASGI wrappers that gate a delegate behind an allowlist.

AllowlistHandler wraps another ASGI application (a mounted sub-app,
StaticFiles, ...). AllowlistHandlerFunc wraps plain endpoint callables
taking a Request and returning a Response, sync or async.

Both route permitted requests to ``allow``. Denied requests go to
``deny`` when one is given, otherwise they get 401. A request whose
client address cannot be determined gets 500.
"""
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocketClose

from ipacl.core.acl import ACL
from ipacl.core.errors import AddressLookupError, AllowlistConfigError
from ipacl.core.lookup import http_request_lookup

logger = logging.getLogger(__name__)

Endpoint = Callable[[Request], Union[Response, Awaitable[Response]]]

_GATED_SCOPES = ("http", "websocket")


def _error_response(scope: Scope, status_code: int, text: str) -> ASGIApp:
    if scope["type"] == "websocket":
        return WebSocketClose(code=1011 if status_code >= 500 else 1008, reason=text)
    return PlainTextResponse(text, status_code=status_code)


class _Gate:
    """Shared construction checks and admission decision."""

    def __init__(self, allow, deny, acl: Optional[ACL], trust_forwarded: bool):
        if allow is None:
            raise AllowlistConfigError("allowlist: allow cannot be None")
        if acl is None:
            raise AllowlistConfigError("allowlist: ACL cannot be None")
        self.allowlist = acl
        self.trust_forwarded = trust_forwarded

    def _admit(self, scope: Scope) -> Optional[bool]:
        """Return the membership decision, or None when the lookup failed."""
        try:
            ip = http_request_lookup(scope, trust_forwarded=self.trust_forwarded)
        except AddressLookupError as e:
            logger.error("failed to lookup request address: %s", e)
            return None
        permitted = self.allowlist.permitted(ip)
        if not permitted:
            logger.info("IP %s rejected by allowlist (path: %s)", ip, scope.get("path"))
        return permitted


class AllowlistHandler(_Gate):
    """Wrap an ASGI application with IP allowlisting."""

    def __init__(
        self,
        allow: ASGIApp,
        deny: Optional[ASGIApp],
        acl: ACL,
        trust_forwarded: bool = False,
    ):
        super().__init__(allow, deny, acl, trust_forwarded)
        self.allow_handler = allow
        self.deny_handler = deny

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in _GATED_SCOPES:
            await self.allow_handler(scope, receive, send)
            return

        admitted = self._admit(scope)
        if admitted is None:
            response = _error_response(scope, 500, "Internal Server Error")
        elif admitted:
            await self.allow_handler(scope, receive, send)
            return
        elif self.deny_handler is not None:
            await self.deny_handler(scope, receive, send)
            return
        else:
            response = _error_response(scope, 401, "Unauthorized")
        await response(scope, receive, send)


class AllowlistHandlerFunc(_Gate):
    """Wrap a pair of endpoint callables with IP allowlisting.

    Instances are ASGI applications, so they can be passed directly to
    ``Route`` or ``app.add_route``. Endpoints take a Request, so only http
    scopes are served; a websocket is closed with 1003 before any lookup.
    """

    def __init__(
        self,
        allow: Endpoint,
        deny: Optional[Endpoint],
        acl: ACL,
        trust_forwarded: bool = False,
    ):
        super().__init__(allow, deny, acl, trust_forwarded)
        self.allow = allow
        self.deny = deny

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await WebSocketClose(code=1003, reason="Unsupported")(scope, receive, send)
            return
        if scope["type"] != "http":
            return

        admitted = self._admit(scope)
        if admitted is None:
            response = _error_response(scope, 500, "Internal Server Error")
        elif admitted:
            response = await _call_endpoint(self.allow, Request(scope, receive))
        elif self.deny is not None:
            response = await _call_endpoint(self.deny, Request(scope, receive))
        else:
            response = _error_response(scope, 401, "Unauthorized")
        await response(scope, receive, send)


async def _call_endpoint(endpoint: Endpoint, request: Request) -> Response:
    if inspect.iscoroutinefunction(endpoint):
        return await endpoint(request)
    response = await run_in_threadpool(endpoint, request)
    # async callable objects are not detected above
    if inspect.isawaitable(response):
        response = await response
    return response
