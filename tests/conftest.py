"""
tests/conftest.py -- Shared test fixtures for jwt-tutorial.

This module provides:
  - client:     TestClient over the fully assembled app (asgi.app)
  - build_app:  factory for a bare FastAPI app guarded by an arbitrary
                FilterChainProxy, for policies other than the shipped one

Environment defaults must be set before any core/api import because
get_settings() is an lru_cache singleton read while api.main loads.
TestClient sends Host: testserver, which the production ALLOWED_HOSTS
default would reject.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator

# CRITICAL: set before importing the app so get_settings() picks these up.
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from starlette.middleware.base import BaseHTTPMiddleware

from asgi import app
from security.chain import FilterChainProxy

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real app, lifespan included."""
    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client


def _echo_app(proxy: FilterChainProxy) -> FastAPI:
    """A catch-all app: every request that gets past the proxy answers 200.

    The response reports whether the ignore list was hit, so tests can tell
    a bypassed request from a granted one.
    """
    guarded = FastAPI()
    guarded.add_middleware(BaseHTTPMiddleware, dispatch=proxy.dispatch)

    @guarded.api_route("/{rest:path}", methods=_ALL_METHODS)
    async def catch_all(request: Request, rest: str) -> dict:
        return {
            "path": request.url.path,
            "method": request.method,
            "ignored": getattr(request.state, "security_ignored", None),
        }

    return guarded


@pytest.fixture
def build_app() -> Callable[[FilterChainProxy], TestClient]:
    """Return a factory: proxy -> TestClient over a catch-all app guarded by it."""

    def factory(proxy: FilterChainProxy) -> TestClient:
        return TestClient(_echo_app(proxy))

    return factory
