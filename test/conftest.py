from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

# Load dotenv files early so the server settings pick up test overrides
TEST_ROOT = Path(__file__).resolve().parent
load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)

# Settings are read at import time, so the test defaults are set before any dressla import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DRESSLA_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DRESSLA_JWT_SECRET", "test-secret")
os.environ.setdefault("LOGFIRE_ENABLED", "false")


LOCAL_HOSTS = frozenset({"", "localhost", "127.0.0.1", "test"})


def _is_local(url) -> bool:
    # relative URLs come from clients with a base_url, ASGI transport included
    host = httpx.URL(str(url)).host
    return host in LOCAL_HOSTS or host.startswith("mock")


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    """Fail any test that would reach BOG or the e-mail provider for real."""
    orig_sync = httpx.Client.request
    orig_async = httpx.AsyncClient.request

    def offline_sync(self, method, url, *args, **kwargs):
        if not _is_local(url):
            raise RuntimeError(f"External HTTP blocked by global offline guard: {url}")
        return orig_sync(self, method, url, *args, **kwargs)

    async def offline_async(self, method, url, *args, **kwargs):
        if not _is_local(url):
            raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url}")
        return await orig_async(self, method, url, *args, **kwargs)

    monkeypatch.setattr(httpx.Client, "request", offline_sync)
    monkeypatch.setattr(httpx.AsyncClient, "request", offline_async)
