"""Tests for FilterChainProxy: evaluate() and the Starlette middleware dispatch.

Uses the build_app fixture (conftest.py) to put arbitrary policies in front
of a catch-all app, so the deny and reject branches -- which the shipped
allow-all policy never reaches -- are exercised through a real ASGI stack.

Covers:
- Ignored paths bypass even a deny-everything chain
- 403 envelope on denial, pass-through on grant
- Requests outside every chain's security_matcher pass through
- Firewall rejection of un-normalized paths (evaluate and dispatch)
"""

import asyncio

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from security.chain import FilterChainProxy, rejection_reason
from security.http import HttpSecurity
from security.web import WebSecurity


def _deny_all_except_ignored() -> FilterChainProxy:
    web = WebSecurity()
    web.ignoring().request_matchers("/h2-console/**", "/favicon.ico")
    chain = HttpSecurity().authorize_http_requests(lambda auth: auth.any_request().deny_all()).build()
    return web.build([chain])


# ---------------------------------------------------------------------------
# evaluate()
# ---------------------------------------------------------------------------


def test_evaluate_ignored_path_is_bypassed():
    decision = _deny_all_except_ignored().evaluate("GET", "/h2-console/login.do")
    assert decision.granted
    assert decision.ignored
    assert decision.reason == "ignored"


def test_evaluate_denied_path():
    decision = _deny_all_except_ignored().evaluate("POST", "/api/v1/echo")
    assert not decision.granted
    assert not decision.ignored


def test_evaluate_outside_every_chain():
    chain = HttpSecurity().security_matcher("/api/**").authorize_http_requests(
        lambda auth: auth.any_request().deny_all()
    ).build()
    proxy = WebSecurity().build([chain])
    decision = proxy.evaluate("GET", "/public")
    assert decision.granted
    assert decision.reason == "no security filter chain"
    assert not proxy.evaluate("GET", "/api/x").granted


def test_first_matching_chain_decides():
    api = HttpSecurity().security_matcher("/api/**").authorize_http_requests(
        lambda auth: auth.any_request().permit_all()
    ).build()
    rest = HttpSecurity().authorize_http_requests(lambda auth: auth.any_request().deny_all()).build()
    proxy = WebSecurity().build([api, rest])
    assert proxy.evaluate("GET", "/api/x").granted
    assert not proxy.evaluate("GET", "/other").granted


def test_describe_lists_ignored_and_chains():
    summary = _deny_all_except_ignored().describe()
    assert summary == {
        "ignored": ["Ant [pattern='/h2-console/**']", "Ant [pattern='/favicon.ico']"],
        "chains": [{"matcher": "any request", "rules": ["any request -> denyAll"]}],
    }


# ---------------------------------------------------------------------------
# Firewall
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "path",
    ["/h2-console/../admin", "/h2-console/./x", "//favicon.ico", "/a\\b", "/a\x00b", "relative"],
)
def test_firewall_rejects_unnormalized_paths(path):
    assert rejection_reason(path) is not None
    decision = _deny_all_except_ignored().evaluate("GET", path)
    assert not decision.granted
    assert decision.reason.startswith("rejected:")


@pytest.mark.parametrize("path", ["/", "/h2-console/", "/a/b.c/d", "/file..txt"])
def test_firewall_accepts_normal_paths(path):
    assert rejection_reason(path) is None


def test_firewall_can_be_disabled():
    proxy = FilterChainProxy(ignored=(), chains=(), firewall=False)
    assert proxy.evaluate("GET", "/a/../b").granted


def test_dispatch_rejects_traversal_into_ignored_prefix():
    """'/h2-console/../admin' must not ride the ignore list past a deny-all chain."""
    proxy = _deny_all_except_ignored()
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/h2-console/../admin",
        "raw_path": b"/h2-console/../admin",
        "query_string": b"",
        "headers": [],
    }
    reached = []

    async def call_next(request):
        reached.append(request)
        return PlainTextResponse("handler")

    response = asyncio.run(proxy.dispatch(Request(scope), call_next))
    assert response.status_code == 400
    assert b"rejected_request" in response.body
    assert reached == []


# ---------------------------------------------------------------------------
# dispatch() through ASGI
# ---------------------------------------------------------------------------


def test_ignored_paths_reach_handler_under_deny_all(build_app):
    client = build_app(_deny_all_except_ignored())
    for path in ("/h2-console", "/h2-console/login.do", "/favicon.ico"):
        resp = client.get(path)
        assert resp.status_code == 200, path
        assert resp.json()["ignored"] is True


def test_denied_request_gets_403_envelope(build_app):
    client = build_app(_deny_all_except_ignored())
    resp = client.post("/api/v1/echo", json={"message": "hi"})
    assert resp.status_code == 403
    assert resp.json() == {"error": {"code": "forbidden", "message": "Access denied."}}


def test_granted_request_is_marked_not_ignored(build_app):
    web = WebSecurity()
    chain = HttpSecurity().authorize_http_requests(lambda auth: auth.any_request().permit_all()).build()
    client = build_app(web.build([chain]))
    resp = client.put("/anything/here")
    assert resp.status_code == 200
    assert resp.json() == {"path": "/anything/here", "method": "PUT", "ignored": False}


def test_access_predicate_sees_request_headers(build_app):
    chain = (
        HttpSecurity()
        .authorize_http_requests(lambda auth: auth.any_request().access(lambda ctx: ctx.headers.get("x-demo") == "yes"))
        .build()
    )
    client = build_app(WebSecurity().build([chain]))
    assert client.get("/x", headers={"X-Demo": "yes"}).status_code == 200
    assert client.get("/x").status_code == 403
