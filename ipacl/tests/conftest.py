"""Shared test fixtures.

Provides:
- Settings pointing the file server at a temporary directory
- FastAPI test app built from those settings
- A factory for httpx AsyncClients that appear to come from a given IP
"""
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Keep the developer's environment out of the tests
for _key in list(os.environ):
    if _key.startswith("IPACL_"):
        del os.environ[_key]

from httpx import ASGITransport, AsyncClient

from ipacl.core.config import AllowlistSettings, get_settings
from ipacl.main import create_app

get_settings.cache_clear()


@asynccontextmanager
async def _client_from(app, ip: str, port: int = 40000):
    """Async HTTP client whose requests carry ``ip`` as the remote address."""
    transport = ASGITransport(app=app, client=(ip, port))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def client_from():
    """Factory: ``async with client_from(app, "8.8.8.8") as client``."""
    return _client_from


@pytest.fixture()
def files_dir(tmp_path):
    root = tmp_path / "files"
    root.mkdir()
    (root / "hello.txt").write_text("hello world\n")
    return root


@pytest.fixture()
def make_settings(files_dir):
    """Build settings for a test, overriding any field by name."""
    def _make(**overrides) -> AllowlistSettings:
        values = {
            "files_root": str(files_dir),
            "allowed_ips_raw": "127.0.0.1",
            "admin_ips_raw": "127.0.0.1,::1",
        }
        values.update(overrides)
        return AllowlistSettings(**values)
    return _make


@pytest.fixture()
def settings(make_settings):
    return make_settings()


@pytest.fixture()
def app(settings):
    """Create a fresh FastAPI app for testing."""
    return create_app(settings)
