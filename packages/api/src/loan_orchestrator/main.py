# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loan_db import init_db
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .clients import close_gateways, init_gateways
from .core.config import settings
from .routes import applications, health
from .schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    configure_logging(settings.LOG_LEVEL)
    await init_db()
    init_gateways(settings)
    logger.info("%s %s started", settings.APP_NAME, __version__)
    yield
    await close_gateways()


app = FastAPI(
    title="Loan Application Orchestrator",
    description="Orchestrates underwriting, decisions and funding for loan applications",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(status_code: int, detail: str, request: Request) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=_request_id(request),
        instance=request.url.path,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), request)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    body = _build_error(422, str(exc.errors()), request)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    body = _build_error(500, "An unexpected error occurred.", request)
    logger.exception("Unhandled exception (request_id=%s)", body.request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": f"{settings.APP_NAME} {__version__}"}
