"""
security/http.py -- HttpSecurity builder: authorization rules for one filter chain.

Usage (the shape every policy in this repo is written in):

    http.authorize_http_requests(
        lambda auth: auth.request_matchers("/admin/**").deny_all()
                         .any_request().permit_all()
    )
    chain = http.build()

Rules are evaluated in registration order, so any_request() must come last.
Every ordering or completeness mistake raises SecurityConfigurationError
while the policy is being built, i.e. at startup, never per request.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from security.chain import SecurityFilterChain
from security.exceptions import SecurityConfigurationError
from security.matchers import AnyRequestMatcher, OrRequestMatcher, RequestMatcher, to_matchers
from security.models import AuthorizationContext, AuthorizationRule

logger = logging.getLogger("jwttutorial.security")


def _permit(_context: AuthorizationContext) -> bool:
    return True


def _deny(_context: AuthorizationContext) -> bool:
    return False


class AuthorizedUrl:
    """Pending rule: a set of matchers waiting for exactly one access decision."""

    def __init__(self, registry: AuthorizationRegistry, matcher: RequestMatcher) -> None:
        self._registry = registry
        self._matcher = matcher
        self._decided = False

    def permit_all(self) -> AuthorizationRegistry:
        return self._decide(_permit, "permitAll")

    def deny_all(self) -> AuthorizationRegistry:
        return self._decide(_deny, "denyAll")

    def access(self, check: Callable[[AuthorizationContext], bool]) -> AuthorizationRegistry:
        """Grant when check(context) returns True.

        The context carries method, path, headers and any {name} template
        variables captured by the matcher.
        """
        return self._decide(check, "access")

    def _decide(self, check: Callable[[AuthorizationContext], bool], description: str) -> AuthorizationRegistry:
        if self._decided:
            raise SecurityConfigurationError(f"An access rule is already configured for {self._matcher}")
        self._decided = True
        self._registry._add_rule(AuthorizationRule(matcher=self._matcher, check=check, description=description))
        return self._registry


class AuthorizationRegistry:
    """Collects (matcher -> decision) rules for HttpSecurity.authorize_http_requests."""

    def __init__(self) -> None:
        self._rules: list[AuthorizationRule] = []
        self._pending: list[AuthorizedUrl] = []
        self._any_request_configured = False

    def request_matchers(self, *patterns: str | RequestMatcher, method: str | None = None) -> AuthorizedUrl:
        if self._any_request_configured:
            raise SecurityConfigurationError("Can't configure request_matchers after any_request")
        if not patterns:
            raise SecurityConfigurationError("request_matchers needs at least one pattern or matcher")
        matchers = to_matchers(*patterns, method=method)
        return self._pending_url(matchers[0] if len(matchers) == 1 else OrRequestMatcher(*matchers))

    def any_request(self) -> AuthorizedUrl:
        if self._any_request_configured:
            raise SecurityConfigurationError("Can't configure any_request after itself")
        self._any_request_configured = True
        return self._pending_url(AnyRequestMatcher())

    def _pending_url(self, matcher: RequestMatcher) -> AuthorizedUrl:
        url = AuthorizedUrl(self, matcher)
        self._pending.append(url)
        return url

    def _add_rule(self, rule: AuthorizationRule) -> None:
        self._rules.append(rule)

    def build_rules(self) -> tuple[AuthorizationRule, ...]:
        undecided = [url for url in self._pending if not url._decided]
        if undecided:
            raise SecurityConfigurationError(f"An access rule is missing for {undecided[0]._matcher}")
        if not self._rules:
            raise SecurityConfigurationError(
                "At least one mapping is required (for example, auth.any_request().permit_all())"
            )
        return tuple(self._rules)


class HttpSecurity:
    """Builder for a single SecurityFilterChain.

    Without authorize_http_requests() the chain has no authorization step
    and lets every request it covers through. Each instance builds once.
    """

    def __init__(self) -> None:
        self._security_matcher: RequestMatcher = AnyRequestMatcher()
        self._registry: AuthorizationRegistry | None = None
        self._built = False

    def security_matcher(self, *patterns: str | RequestMatcher) -> HttpSecurity:
        """Restrict the chain to requests matching any of patterns."""
        if not patterns:
            raise SecurityConfigurationError("security_matcher needs at least one pattern or matcher")
        matchers = to_matchers(*patterns)
        self._security_matcher = matchers[0] if len(matchers) == 1 else OrRequestMatcher(*matchers)
        return self

    def authorize_http_requests(self, customizer: Callable[[AuthorizationRegistry], object]) -> HttpSecurity:
        if self._registry is None:
            self._registry = AuthorizationRegistry()
        customizer(self._registry)
        return self

    def build(self) -> SecurityFilterChain:
        if self._built:
            raise SecurityConfigurationError("This object has already been built")
        self._built = True
        rules = self._registry.build_rules() if self._registry is not None else None
        chain = SecurityFilterChain(request_matcher=self._security_matcher, rules=rules)
        logger.info("Built security filter chain: %s", chain)
        return chain
