"""
api/routes/v1/hello.py -- Demo endpoints that sit behind the security filter chain.

Routes:
  GET  /api/v1/hello  -- fixed greeting
  POST /api/v1/echo   -- echoes a JSON message back

Neither route declares an auth dependency. Whatever the filter chain grants
reaches these handlers unchanged, which is what the integration tests use
them for.
"""

from fastapi import APIRouter, Request

from api.limiter import limiter
from api.models import EchoRequest, EchoResponse, HelloResponse
from core.config import get_settings

router = APIRouter()


@router.get("/hello", response_model=HelloResponse)
async def hello() -> HelloResponse:
    return HelloResponse(message="hello")


# The router must register the limited wrapper, so @router sits outermost.
@router.post("/echo", response_model=EchoResponse)
@limiter.limit(get_settings().echo_rate_limit)
async def echo(request: Request, body: EchoRequest) -> EchoResponse:
    """Return the submitted message with its length."""
    return EchoResponse(message=body.message, length=len(body.message))
