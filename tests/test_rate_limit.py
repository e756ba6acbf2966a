"""
tests/test_rate_limit.py -- Integration tests for the per-route slowapi limit on POST /api/v1/echo.

The limiter keeps its counters in a process-wide in-memory store, so every
test here starts and ends with limiter.reset() to keep other modules'
echo calls from counting against the limit (and vice versa).
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from core.config import get_settings


@pytest.fixture(autouse=True)
def fresh_limiter() -> Generator[None, None, None]:
    limiter.reset()
    yield
    limiter.reset()


def _limit_count() -> int:
    # "30/minute" -> 30
    return int(get_settings().echo_rate_limit.split("/")[0])


def test_echo_is_throttled_after_limit(client: TestClient) -> None:
    """The (limit + 1)th echo within the window must get 429 with Retry-After."""
    limit = _limit_count()
    codes = [client.post("/api/v1/echo", json={"message": "x"}).status_code for _ in range(limit)]
    assert codes == [200] * limit

    resp = client.post("/api/v1/echo", json={"message": "x"})
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "rate_limited"
    assert int(resp.headers["Retry-After"]) > 0


def test_throttling_is_per_route(client: TestClient) -> None:
    """Exhausting the echo limit leaves unlimited routes untouched."""
    for _ in range(_limit_count() + 1):
        client.post("/api/v1/echo", json={"message": "x"})
    assert client.get("/api/v1/hello").status_code == 200
    assert client.get("/api/v1/health").status_code == 200
