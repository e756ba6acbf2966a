"""
security/web.py -- WebSecurity builder: the ignore list and final FilterChainProxy assembly.

A WebSecurityCustomizer is any callable taking a WebSecurity. Customizers
register paths that must never see a security filter:

    def customize(web: WebSecurity) -> None:
        web.ignoring().request_matchers("/favicon.ico")

Ignoring is stronger than permit_all(): an ignored request skips every
chain, so nothing a chain adds later applies to it. Only the firewall still
runs. Every ignored matcher is logged at build time so the exemption is
visible in the startup log.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from security.chain import FilterChainProxy, SecurityFilterChain
from security.exceptions import SecurityConfigurationError
from security.matchers import RequestMatcher, to_matchers

logger = logging.getLogger("jwttutorial.security")


class IgnoredRequestConfigurer:
    """Chainable registration of request matchers that bypass security."""

    def __init__(self, web: WebSecurity) -> None:
        self._web = web

    def request_matchers(self, *patterns: str | RequestMatcher) -> IgnoredRequestConfigurer:
        if not patterns:
            raise SecurityConfigurationError("ignoring().request_matchers needs at least one pattern or matcher")
        self._web._ignored.extend(to_matchers(*patterns))
        return self


class WebSecurity:
    def __init__(self) -> None:
        self._ignored: list[RequestMatcher] = []
        self._built = False

    def ignoring(self) -> IgnoredRequestConfigurer:
        return IgnoredRequestConfigurer(self)

    def build(self, chains: Iterable[SecurityFilterChain] = (), firewall: bool = True) -> FilterChainProxy:
        if self._built:
            raise SecurityConfigurationError("This object has already been built")
        self._built = True
        for matcher in self._ignored:
            logger.warning(
                "Security is bypassed for %s. Prefer permit_all() via authorize_http_requests unless "
                "the path must skip every filter.",
                matcher,
            )
        chains = tuple(chains)
        logger.info("Security filter chain proxy ready (%d ignored, %d chain(s))", len(self._ignored), len(chains))
        return FilterChainProxy(ignored=tuple(self._ignored), chains=chains, firewall=firewall)


WebSecurityCustomizer = Callable[[WebSecurity], None]
