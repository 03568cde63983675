"""Administrative endpoints for the file allowlist.

These are plain Request -> Response callables; ``register_admin_routes``
wraps each one in an AllowlistHandlerFunc gated by the admin allowlist.
The list they mutate is ``app.state.file_allowlist``.
"""
import logging

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from ipacl.core.acl import ACL
from ipacl.core.errors import AllowlistFormatError, E, api_error
from ipacl.core.handler import AllowlistHandlerFunc
from ipacl.core.validation import parse_ip, parse_network

logger = logging.getLogger(__name__)


async def _form_value(request: Request, key: str) -> str:
    """Read a value from the query string, falling back to a form body."""
    value = request.query_params.get(key)
    if value is None and request.method in ("POST", "PUT"):
        form = await request.form()
        value = form.get(key)
    return (value or "").strip()


async def _entry(request: Request):
    """Parse the ``ip`` parameter for whichever list kind is being served."""
    raw = await _form_value(request, "ip")
    if request.app.state.file_allowlist_kind == "network":
        return raw, parse_network(raw)
    return raw, parse_ip(raw)


async def add_ip(request: Request) -> Response:
    raw, entry = await _entry(request)
    if entry is None:
        logger.warning("Ignoring invalid allowlist entry: %r", raw)
    request.app.state.file_allowlist.add(entry)
    logger.info("request to add %s to the allowlist", raw)
    return PlainTextResponse(f"Added {raw} to allowlist.\n")


async def remove_ip(request: Request) -> Response:
    raw, entry = await _entry(request)
    if entry is None:
        logger.warning("Ignoring invalid allowlist entry: %r", raw)
    request.app.state.file_allowlist.remove(entry)
    logger.info("request to remove %s from the allowlist", raw)
    return PlainTextResponse(f"Removed {raw} from allowlist.\n")


async def dump_allowlist(request: Request) -> Response:
    acl = request.app.state.file_allowlist
    if not hasattr(acl, "to_json"):
        raise api_error(500, E.INTERNAL_ERROR, "Allowlist cannot be serialized")
    return Response(content=acl.to_json(), media_type="application/json")


async def load_allowlist(request: Request) -> Response:
    """Replace the whole allowlist with a compact-form request body."""
    acl = request.app.state.file_allowlist
    if not hasattr(acl, "load_json"):
        raise api_error(500, E.INTERNAL_ERROR, "Allowlist cannot be loaded")
    body = (await request.body()).strip()
    try:
        acl.load_json(body)
    except AllowlistFormatError as e:
        logger.warning("Rejected allowlist load: %s", e)
        raise api_error(400, E.INVALID_ALLOWLIST, str(e))
    logger.info("allowlist replaced with %d entries", len(acl))
    return Response(content=acl.to_json(), media_type="application/json")


def register_admin_routes(app, admin_acl: ACL, trust_forwarded: bool = False) -> None:
    """Mount /add, /del, /dump and /load behind the admin allowlist."""
    routes = (
        ("/add", add_ip, ["GET", "POST"]),
        ("/del", remove_ip, ["GET", "POST"]),
        ("/dump", dump_allowlist, ["GET"]),
        ("/load", load_allowlist, ["POST", "PUT"]),
    )
    for path, endpoint, methods in routes:
        handler = AllowlistHandlerFunc(endpoint, None, admin_acl, trust_forwarded=trust_forwarded)
        app.add_route(path, handler, methods=methods, include_in_schema=False)
