"""
FastAPI application for Campus Issues.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

from .config import get_settings
from .db.base import init_database
from .errors import CampusIssuesError, ValidationError
from .issues.routes import router as issues_router
from .log import configure_logging
from .users.routes import router as users_router

logger = structlog.get_logger()

settings = get_settings()


def _version() -> str:
    return importlib.metadata.version("campus-issues")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings)
    logger.info("starting", app=settings.app_name, environment=settings.environment)

    try:
        init_database()
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    logger.info("shutdown_complete")


app = FastAPI(
    title=settings.app_name,
    description="Campus disruption reporting, triage and resolution tracking",
    version=_version(),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error handlers
# =============================================================================


@app.exception_handler(CampusIssuesError)
async def handle_app_error(request: Request, exc: CampusIssuesError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed", path=request.url.path, code=exc.code, error=exc.error
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _validation_response(errors: list) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in errors
    )
    error = ValidationError("Invalid request", error=details)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(RequestValidationError)
async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _validation_response(exc.errors())


@app.exception_handler(PydanticValidationError)
async def handle_schema_validation(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    return _validation_response(exc.errors())


def _internal_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "code": "INTERNAL_ERROR",
            "message": "Internal server error",
            "error": str(exc),
        },
    )


@app.middleware("http")
async def catch_unexpected_errors(request: Request, call_next) -> Response:
    """Answer unexpected exceptions with the 500 envelope without re-raising."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("unhandled_error", path=request.url.path)
        return _internal_error_response(exc)


# =============================================================================
# Health and info endpoints
# =============================================================================


@app.get("/health", tags=["system"])
async def health() -> dict:
    """Basic liveness check."""
    return {"status": "ok"}


@app.get("/healthz", tags=["system"])
def healthz() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version", tags=["system"])
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": _version()}


app.include_router(issues_router)
app.include_router(users_router)
