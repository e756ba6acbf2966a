"""
security/models.py -- Value objects passed between matchers, chains and the proxy.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in core/ -- dataclasses own the shape; builders and chains do the work.
Everything here is frozen: a policy is assembled once at startup and shared
by every request afterwards.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from security.matchers import RequestMatcher


@dataclass(frozen=True)
class MatchResult:
    """Outcome of testing one request against one matcher.

    variables holds the values captured by {name} placeholders in an Ant
    pattern. It is empty for matchers without placeholders and for misses.
    """

    match: bool
    variables: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthorizationContext:
    """The parts of a request an authorization rule may look at."""

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    variables: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthorizationDecision:
    """Result of evaluating a request against the security policy.

    ignored is True when the request matched the ignore list and no
    authorization step ran at all. An ignored request is always granted.
    """

    granted: bool
    reason: str = ""
    ignored: bool = False


@dataclass(frozen=True)
class AuthorizationRule:
    """One (matcher -> check) mapping registered via authorize_http_requests."""

    matcher: RequestMatcher
    check: Callable[[AuthorizationContext], bool]
    description: str  # "permitAll", "denyAll", "access"
