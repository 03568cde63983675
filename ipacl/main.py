"""
ipacl - allowlisted file server.

Serves a static directory under /files/ to allowlisted clients, with
/add, /del, /dump and /load endpoints (restricted to the admin allowlist)
for managing the file allowlist at runtime.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Tuple

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from ipacl.api.admin import register_admin_routes
from ipacl.core.acl import ACL
from ipacl.core.config import AllowlistSettings, get_settings
from ipacl.core.handler import AllowlistHandler
from ipacl.core.host import BasicHostACL, load_hosts
from ipacl.core.network import BasicNetACL, load_networks
from ipacl.core.stub import HostStub, NetStub
from ipacl.core.validation import parse_ip, parse_network

logger = logging.getLogger(__name__)


def build_file_allowlist(settings: AllowlistSettings) -> Tuple[ACL, str]:
    """Build the allowlist guarding /files/ and report its kind ("host" or "network")."""
    kind = "network" if settings.allowed_networks else "host"

    if settings.stub_enforcement:
        return (NetStub() if kind == "network" else HostStub()), kind

    if kind == "network":
        acl = BasicNetACL()
        if settings.allowlist_file:
            acl = load_networks(Path(settings.allowlist_file).read_bytes())
        for entry in settings.allowed_networks:
            network = parse_network(entry)
            if network is None:
                logger.warning("Invalid network in IPACL_ALLOWED_NETWORKS: %s", entry)
            acl.add(network)
        return acl, kind

    acl = BasicHostACL()
    if settings.allowlist_file:
        acl = load_hosts(Path(settings.allowlist_file).read_bytes())
    for entry in settings.allowed_ips:
        ip = parse_ip(entry)
        if ip is None:
            logger.warning("Invalid IP in IPACL_ALLOWED_IPS: %s", entry)
        acl.add(ip)
    return acl, kind


def build_admin_allowlist(settings: AllowlistSettings) -> ACL:
    if settings.stub_enforcement:
        return HostStub()
    acl = BasicHostACL()
    for entry in settings.admin_ips:
        ip = parse_ip(entry)
        if ip is None:
            logger.warning("Invalid IP in IPACL_ADMIN_IPS: %s", entry)
        acl.add(ip)
    return acl


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = app.state.settings
    logger.info(
        "Serving %s on %s:%s (%s allowlist, %d entries)",
        settings.files_root, settings.host, settings.port,
        app.state.file_allowlist_kind, _size(app.state.file_allowlist),
    )
    yield
    logger.info("ipacl stopped")


def _size(acl: ACL) -> int:
    try:
        return len(acl)
    except TypeError:
        return 0


def create_app(settings: Optional[AllowlistSettings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="ipacl",
        description="Allowlisted file server",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    file_acl, kind = build_file_allowlist(settings)
    admin_acl = build_admin_allowlist(settings)

    app.state.settings = settings
    app.state.file_allowlist = file_acl
    app.state.file_allowlist_kind = kind
    app.state.admin_allowlist = admin_acl

    files = StaticFiles(directory=settings.files_root, check_dir=False)
    app.mount(
        "/files",
        AllowlistHandler(files, None, file_acl, trust_forwarded=settings.trust_forwarded_for),
        name="files",
    )
    register_admin_routes(app, admin_acl, trust_forwarded=settings.trust_forwarded_for)

    # Health check endpoint (not gated so monitoring still works)
    @app.get("/health", tags=["health"])
    async def health_check():
        return {"status": "ok", "service": "ipacl"}

    return app
