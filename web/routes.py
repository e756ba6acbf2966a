"""
web/routes.py -- Server-rendered routes for the jwt-tutorial web UI.

These routes share app.state with the API routes (same security proxy) but
return HTML instead of JSON. Both paths below are on the default ignore list
(SECURITY_IGNORED_PATHS), so no security filter ever runs in front of them.

Routes:
  GET /h2-console              -- diagnostics console (404 when CONSOLE_ENABLED=false)
  GET /h2-console/{subpath}    -- console sub-resources; none exist yet, always 404
  GET /favicon.ico             -- 204, the app ships no icon
"""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from core.config import APP_NAME, APP_VERSION, get_settings
from security.chain import FilterChainProxy

logger = logging.getLogger("jwttutorial.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()


def _console_not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "Console resource not found."},
    )


@router.get("/h2-console", response_class=HTMLResponse)
def console(request: Request) -> HTMLResponse:
    """Render the diagnostics console: app version, settings and the active policy."""
    settings = get_settings()
    if not settings.console_enabled:
        raise _console_not_found()
    proxy: FilterChainProxy = request.app.state.security
    return templates.TemplateResponse(
        request,
        "console.html",
        {
            "app_name": APP_NAME,
            "version": APP_VERSION,
            "debug": settings.debug,
            "policy": proxy.describe(),
            "security_ignored": getattr(request.state, "security_ignored", False),
        },
    )


@router.get("/h2-console/{subpath:path}")
def console_resource(subpath: str) -> Response:
    logger.debug("Console resource requested: %s", subpath)
    raise _console_not_found()


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)
