"""
API request and response models for jwt-tutorial REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in security/models.py,
which own the internal policy representation. Route handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from security.models import AuthorizationDecision

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class EchoRequest(BaseModel):
    """Request body for POST /api/v1/echo."""

    model_config = ConfigDict(str_strip_whitespace=True)

    message: str = Field(min_length=1, max_length=1000)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class HelloResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class EchoResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    length: int


class ChainSummary(BaseModel):
    """One filter chain: the request matcher it covers and its rules in order."""

    model_config = ConfigDict(frozen=True)

    matcher: str
    rules: list[str]


class PolicyResponse(BaseModel):
    """Response for GET /api/v1/security/policy."""

    model_config = ConfigDict(frozen=True)

    ignored: list[str]
    chains: list[ChainSummary]


class DecisionResponse(BaseModel):
    """Response for GET /api/v1/security/decision."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    granted: bool
    ignored: bool
    reason: str

    @classmethod
    def from_decision(cls, method: str, path: str, decision: AuthorizationDecision) -> "DecisionResponse":
        return cls(
            method=method,
            path=path,
            granted=decision.granted,
            ignored=decision.ignored,
            reason=decision.reason,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
