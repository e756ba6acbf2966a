"""
security/config.py -- The application's security policy.

Two artifacts, both produced once at startup:
  web_security_customizer()  -- ignore list: the console UI subtree and the
                                favicon never pass through a security filter.
  filter_chain(http)         -- every other request is permitted
                                unconditionally.

The policy is intentionally open. Authentication and role checks are not
defined here; add them as rules ahead of any_request() in filter_chain().
"""

from __future__ import annotations

from core.config import Settings, get_settings
from security.chain import FilterChainProxy, SecurityFilterChain
from security.http import HttpSecurity
from security.matchers import AntPathRequestMatcher
from security.web import WebSecurity, WebSecurityCustomizer


class SecurityConfig:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def web_security_customizer(self) -> WebSecurityCustomizer:
        patterns = tuple(self._settings.security_ignored_paths)

        def customize(web: WebSecurity) -> None:
            ignoring = web.ignoring()
            for pattern in patterns:
                ignoring.request_matchers(AntPathRequestMatcher(pattern))

        return customize

    def filter_chain(self, http: HttpSecurity) -> SecurityFilterChain:
        http.authorize_http_requests(lambda auth: auth.any_request().permit_all())
        return http.build()


def build_filter_chain_proxy(config: SecurityConfig | None = None) -> FilterChainProxy:
    """Assemble the FilterChainProxy from a SecurityConfig.

    Called once while the app module loads. Any SecurityConfigurationError
    propagates and aborts startup.
    """
    config = config or SecurityConfig()
    web = WebSecurity()
    config.web_security_customizer()(web)
    chain = config.filter_chain(HttpSecurity())
    return web.build([chain])
