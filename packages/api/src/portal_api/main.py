# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from portal_db import get_db_service
from portal_db.pipeline import RejectReason
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .routes import admin, health, issues, jobs, notifications
from .schemas.error import ErrorResponse
from .services.job import MoveRejectedError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting %s (auth_disabled=%s)", settings.APP_NAME, settings.AUTH_DISABLED)
    yield
    await get_db_service().close()


app = FastAPI(
    title="Onboarding Portal API",
    description="Client onboarding pipeline: board, moves, comments and notifications",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}

_REJECTION_STATUS: dict[RejectReason, int] = {
    RejectReason.PLAN_MISMATCH: 400,
    RejectReason.INVALID_TRANSITION: 400,
    RejectReason.PERMISSION_DENIED: 403,
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(status_code: int, detail: str, request_id: str, **extra) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        **extra,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(MoveRejectedError)
async def move_rejected_handler(request: Request, exc: MoveRejectedError):
    """Rejected status moves carry the reason and the statuses still open to the caller."""
    decision = exc.decision
    status_code = _REJECTION_STATUS.get(decision.reason, 400)
    body = _build_error(
        status_code,
        decision.message,
        _request_id(request),
        reason=decision.reason.value if decision.reason else None,
        permitted=[s.value for s in decision.permitted],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details.

    The detail reads ``field: message`` per error, so board clients can show
    it verbatim.
    """
    problems = [
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    ]
    body = _build_error(422, "; ".join(problems), _request_id(request))
    return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(jobs.router, prefix="/api/onboarding/jobs", tags=["jobs"])
app.include_router(
    notifications.router, prefix="/api/onboarding/notifications", tags=["notifications"]
)
app.include_router(issues.router, prefix="/api/onboarding/issues", tags=["issues"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the Onboarding Portal API"}
