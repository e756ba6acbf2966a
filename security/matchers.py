"""
security/matchers.py -- Request matchers used by the ignore list and the authorization rules.

Ant-style path patterns:
  ?            one character, never '/'
  *            zero or more characters inside a single path segment
  **           zero or more whole path segments ('/h2-console/**' matches
               '/h2-console', '/h2-console/' and '/h2-console/a/b')
  {name}       captures (part of) a segment into a template variable
  {name:regex} same, constrained by regex

Patterns are compiled to a single anchored regular expression once, at
construction. Matching is a regex fullmatch against the request path (never
the query string), so per-request cost does not depend on the number of
wildcards.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from security.exceptions import SecurityConfigurationError
from security.models import MatchResult

_MATCH_ALL = ("**", "/**")

# ?  |  *  |  {var} or {var:regex}, where regex may itself contain {m,n} quantifiers.
_GLOB_RE = re.compile(r"\?|\*|\{((?:\{[^/]+?\}|[^/{}]|\\[{}])+?)\}")

_NO_MATCH = MatchResult(match=False)


class RequestMatcher(ABC):
    """Decides whether a request (method + path) falls under a rule."""

    @abstractmethod
    def matcher(self, method: str, path: str) -> MatchResult: ...

    def matches(self, method: str, path: str) -> bool:
        return self.matcher(method, path).match


@dataclass(frozen=True)
class AnyRequestMatcher(RequestMatcher):
    """Matches every request."""

    def matcher(self, method: str, path: str) -> MatchResult:
        return MatchResult(match=True)

    def __str__(self) -> str:
        return "any request"


def _segment_regex(segment: str, names: list[str]) -> str:
    """Translate one path segment of an Ant pattern into a regex fragment.

    Template variable names are appended to names in order; the fragment
    uses positional group names (_v0, _v1, ...) because Ant variable names
    need not be valid Python identifiers.
    """
    out: list[str] = []
    pos = 0
    for m in _GLOB_RE.finditer(segment):
        out.append(re.escape(segment[pos : m.start()]))
        token = m.group(0)
        if token == "?":
            out.append("[^/]")
        elif token == "*":
            out.append("[^/]*")
        else:
            name, _, constraint = m.group(1).partition(":")
            if not name:
                raise SecurityConfigurationError(f"Empty template variable name in segment {segment!r}")
            out.append(f"(?P<_v{len(names)}>{constraint or '[^/]*'})")
            names.append(name)
        pos = m.end()
    out.append(re.escape(segment[pos:]))
    return "".join(out)


def _compile_pattern(pattern: str, case_sensitive: bool) -> tuple[re.Pattern[str], tuple[str, ...]]:
    if not pattern.startswith("/"):
        raise SecurityConfigurationError(f"Pattern {pattern!r} must start with '/'")

    names: list[str] = []
    parts: list[str] = []
    # segments[0] is always "" because the pattern is absolute.
    for segment in pattern.split("/")[1:]:
        if segment == "**":
            parts.append("(?:/.*)?")
        else:
            parts.append("/" + _segment_regex(segment, names))

    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    try:
        compiled = re.compile("".join(parts), flags)
    except re.error as exc:
        raise SecurityConfigurationError(f"Pattern {pattern!r} is not a valid path pattern: {exc}") from exc
    return compiled, tuple(names)


@dataclass(frozen=True)
class AntPathRequestMatcher(RequestMatcher):
    """Matches requests whose path fits an Ant-style pattern.

    http_method=None matches every method. Two matchers built from the same
    arguments compare equal, which keeps repeated policy construction
    comparable.
    """

    pattern: str
    http_method: str | None = None
    case_sensitive: bool = True
    _regex: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)
    _names: tuple[str, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.http_method is not None:
            object.__setattr__(self, "http_method", self.http_method.upper())
        if self.pattern in _MATCH_ALL:
            return
        regex, names = _compile_pattern(self.pattern, self.case_sensitive)
        object.__setattr__(self, "_regex", regex)
        object.__setattr__(self, "_names", names)

    def matcher(self, method: str, path: str) -> MatchResult:
        if self.http_method is not None and method.upper() != self.http_method:
            return _NO_MATCH
        if self._regex is None:
            return MatchResult(match=True)
        m = self._regex.fullmatch(path)
        if m is None:
            return _NO_MATCH
        variables = {name: m.group(f"_v{i}") for i, name in enumerate(self._names)}
        return MatchResult(match=True, variables=variables)

    def __str__(self) -> str:
        if self.http_method is None:
            return f"Ant [pattern='{self.pattern}']"
        return f"Ant [pattern='{self.pattern}', {self.http_method}]"


@dataclass(frozen=True, init=False)
class OrRequestMatcher(RequestMatcher):
    """Matches when any of the wrapped matchers matches; first hit wins."""

    matchers: tuple[RequestMatcher, ...]

    def __init__(self, *matchers: RequestMatcher) -> None:
        if not matchers:
            raise SecurityConfigurationError("OrRequestMatcher needs at least one matcher")
        object.__setattr__(self, "matchers", tuple(matchers))

    def matcher(self, method: str, path: str) -> MatchResult:
        for candidate in self.matchers:
            result = candidate.matcher(method, path)
            if result.match:
                return result
        return _NO_MATCH

    def __str__(self) -> str:
        return f"Or [{', '.join(str(m) for m in self.matchers)}]"


def to_matchers(*patterns: str | RequestMatcher, method: str | None = None) -> tuple[RequestMatcher, ...]:
    """Coerce a mix of pattern strings and matcher objects into matchers.

    method applies only to the strings; matcher objects keep their own.
    """
    return tuple(p if isinstance(p, RequestMatcher) else AntPathRequestMatcher(p, method) for p in patterns)
