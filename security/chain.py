"""
security/chain.py -- Filter chains and the proxy that applies them to every request.

Request flow through FilterChainProxy.dispatch (outermost check first):
  1. Firewall  -- paths with '.'/'..' segments, '//', backslashes or control
                  characters are rejected with 400. Ant patterns match the
                  raw path, so an un-normalized path could otherwise dodge
                  or fake an ignore-list entry.
  2. Ignored   -- a path on the ignore list skips every remaining step.
  3. Chain     -- the first chain whose request matcher fits decides; its
                  rules are tried in order and the first matching rule wins.
                  A request no rule matches is denied (403).
  4. No chain  -- nothing in the policy covers the request; it passes through.

The layer never answers 401: it has no notion of who the caller is.

Layer rule: no imports from api/. fastapi is allowed here because dispatch()
is a Starlette HTTP middleware callable.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse

from security.matchers import RequestMatcher
from security.models import AuthorizationContext, AuthorizationDecision, AuthorizationRule

logger = logging.getLogger("jwttutorial.security")


@dataclass(frozen=True)
class SecurityFilterChain:
    """One matcher-scoped set of authorization rules.

    rules=None means the chain has no authorization step: every request it
    covers is granted. An empty tuple is never built (HttpSecurity rejects
    authorize_http_requests() without mappings).
    """

    request_matcher: RequestMatcher
    rules: tuple[AuthorizationRule, ...] | None = None

    def matches(self, method: str, path: str) -> bool:
        return self.request_matcher.matches(method, path)

    def authorize(self, method: str, path: str, headers: Mapping[str, str] | None = None) -> AuthorizationDecision:
        if self.rules is None:
            return AuthorizationDecision(granted=True, reason="no authorization rules")
        for rule in self.rules:
            result = rule.matcher.matcher(method, path)
            if not result.match:
                continue
            context = AuthorizationContext(
                method=method.upper(),
                path=path,
                headers=headers or {},
                variables=result.variables,
            )
            return AuthorizationDecision(granted=bool(rule.check(context)), reason=f"{rule.matcher} -> {rule.description}")
        return AuthorizationDecision(granted=False, reason="no matching authorization rule")

    def describe(self) -> dict:
        return {
            "matcher": str(self.request_matcher),
            "rules": [f"{rule.matcher} -> {rule.description}" for rule in self.rules or ()],
        }

    def __str__(self) -> str:
        rules = ", ".join(f"{rule.matcher} -> {rule.description}" for rule in self.rules or ()) or "none"
        return f"SecurityFilterChain [matcher={self.request_matcher}, rules=[{rules}]]"


def rejection_reason(path: str) -> str | None:
    """Return why the firewall refuses path, or None if it is acceptable."""
    if not path.startswith("/"):
        return "path is not absolute"
    if "\\" in path:
        return "path contains a backslash"
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in path):
        return "path contains a control character"
    if "//" in path:
        return "path contains an empty segment"
    if any(segment in (".", "..") for segment in path.split("/")):
        return "path is not normalized"
    return None


class FilterChainProxy:
    """Applies the ignore list and the filter chains to incoming requests.

    Built once by WebSecurity.build() at startup; immutable afterwards, so a
    single instance is shared across all concurrent requests.
    """

    def __init__(
        self,
        ignored: tuple[RequestMatcher, ...] = (),
        chains: tuple[SecurityFilterChain, ...] = (),
        firewall: bool = True,
    ) -> None:
        self.ignored = tuple(ignored)
        self.chains = tuple(chains)
        self.firewall = firewall

    def is_ignored(self, method: str, path: str) -> bool:
        return any(m.matches(method, path) for m in self.ignored)

    def chain_for(self, method: str, path: str) -> SecurityFilterChain | None:
        for chain in self.chains:
            if chain.matches(method, path):
                return chain
        return None

    def evaluate(self, method: str, path: str, headers: Mapping[str, str] | None = None) -> AuthorizationDecision:
        """Decide a request without going through ASGI (CLI, introspection, tests)."""
        if self.firewall:
            reason = rejection_reason(path)
            if reason is not None:
                return AuthorizationDecision(granted=False, reason=f"rejected: {reason}")
        if self.is_ignored(method, path):
            return AuthorizationDecision(granted=True, reason="ignored", ignored=True)
        chain = self.chain_for(method, path)
        if chain is None:
            return AuthorizationDecision(granted=True, reason="no security filter chain")
        return chain.authorize(method, path, headers)

    def describe(self) -> dict:
        return {
            "ignored": [str(m) for m in self.ignored],
            "chains": [chain.describe() for chain in self.chains],
        }

    async def dispatch(self, request: Request, call_next):
        """Starlette HTTP middleware entry point.

        Register with app.add_middleware(BaseHTTPMiddleware, dispatch=proxy.dispatch).
        """
        method = request.method
        path = request.url.path

        if self.firewall:
            reason = rejection_reason(path)
            if reason is not None:
                logger.info("Rejected %s %s: %s", method, path, reason)
                return JSONResponse(
                    status_code=400,
                    content={"error": {"code": "rejected_request", "message": "The request was rejected.", "detail": reason}},
                )

        if self.is_ignored(method, path):
            logger.debug("Security bypassed for %s %s (ignore list)", method, path)
            request.state.security_ignored = True
            return await call_next(request)

        request.state.security_ignored = False
        chain = self.chain_for(method, path)
        if chain is None:
            return await call_next(request)

        decision = chain.authorize(method, path, request.headers)
        if not decision.granted:
            logger.info("Access denied for %s %s (%s)", method, path, decision.reason)
            return JSONResponse(
                status_code=403,
                content={"error": {"code": "forbidden", "message": "Access denied."}},
            )
        logger.debug("Access granted for %s %s (%s)", method, path, decision.reason)
        return await call_next(request)
