"""
api/routes/v1/security.py -- Read-only introspection of the active security policy.

Routes:
  GET /api/v1/security/policy                     -- ignore list and filter chains
  GET /api/v1/security/decision?method=GET&path=/  -- what the policy decides for a request

The decision endpoint runs FilterChainProxy.evaluate(), the same logic the
middleware applies, without sending a request through the stack. It never
uses the caller's own headers, so the answer describes an anonymous request.
"""

from fastapi import APIRouter, HTTPException, Query, Request

from api.models import ChainSummary, DecisionResponse, ErrorDetail, PolicyResponse
from security.chain import FilterChainProxy

router = APIRouter()

_METHODS = {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"}


@router.get("/security/policy", response_model=PolicyResponse)
async def get_policy(request: Request) -> PolicyResponse:
    proxy: FilterChainProxy = request.app.state.security
    summary = proxy.describe()
    return PolicyResponse(
        ignored=summary["ignored"],
        chains=[ChainSummary(**chain) for chain in summary["chains"]],
    )


@router.get("/security/decision", response_model=DecisionResponse)
async def get_decision(
    request: Request,
    path: str = Query(min_length=1, max_length=2048),
    method: str = Query(default="GET", max_length=10),
) -> DecisionResponse:
    """Evaluate method + path against the policy.

    Returns 400 for an unknown HTTP method; any path is accepted and judged
    by the policy itself (a firewall rejection comes back as granted=false).
    """
    method = method.upper()
    if method not in _METHODS:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(
                code="invalid_param",
                message=f"method must be one of: {', '.join(sorted(_METHODS))}",
            ).model_dump(),
        )
    proxy: FilterChainProxy = request.app.state.security
    return DecisionResponse.from_decision(method, path, proxy.evaluate(method, path))
