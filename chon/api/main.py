"""
FastAPI app assembly: logging, middleware, error envelopes and router wiring.
"""
import logging
import os
from typing import Dict, List

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from chon.api.admin_competitions import router as admin_competitions_router
from chon.api.admin_notifications import router as admin_notifications_router
from chon.api.admin_points import router as admin_points_router
from chon.api.admin_transactions import router as admin_transactions_router
from chon.api.advertising import router as advertising_router
from chon.api.app_updates import router as app_updates_router
from chon.api.dashboard import router as dashboard_router
from chon.api.language import router as language_router
from chon.api.player_notifications import router as player_notifications_router
from chon.api.players import router as players_router
from chon.utils.runtime import cors_origins

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="Chon Service",
    description="Backend for the Chon trivia competition app and its admin tools.",
    version="1.0.0",
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Version management answers field errors with 400, everything else with 422
BAD_REQUEST_VALIDATION_PREFIXES = ("/api/app-updates",)


def format_validation_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


@app.exception_handler(RequestValidationError)
async def validation_error_envelope(request: Request, exc: RequestValidationError):
    path = request.url.path or ""
    if path.startswith(BAD_REQUEST_VALIDATION_PREFIXES):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return JSONResponse(
        {"success": False, "message": "Validation failed", "errors": format_validation_errors(exc)},
        status_code=status_code,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_envelope(request: Request, exc: StarletteHTTPException):
    body = {"success": False}
    if isinstance(exc.detail, dict):
        body.update(exc.detail)
    else:
        body["message"] = exc.detail
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


app.include_router(app_updates_router)
app.include_router(players_router)
app.include_router(language_router)
app.include_router(player_notifications_router)
app.include_router(advertising_router)
app.include_router(admin_competitions_router)
app.include_router(admin_notifications_router)
app.include_router(admin_points_router)
app.include_router(admin_transactions_router)
app.include_router(dashboard_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "chon-service"}
