"""FastAPI application for fieldops - ops console and report downloads."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from fieldops import __version__
from fieldops.config import get_config
from fieldops.core.logging import configure_logging
from fieldops.db.connection import close_db
from fieldops.errors import ServiceReportError
from fieldops.web.routes import health, reports

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_config())
    logger.info("app_started", version=__version__)
    yield
    await close_db()


app = FastAPI(
    title="fieldops Ops Console",
    description="Daily service reports for building maintenance visits",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Request Logging Middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            logger.info(
                "request_completed",
                status_code=response.status_code,
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise


app.add_middleware(RequestLoggingMiddleware)


# Exception Handlers
@app.exception_handler(ServiceReportError)
async def service_report_exception_handler(request: Request, exc: ServiceReportError):
    """Map report errors to their HTTP status."""
    logger.warning(
        "service_report_error",
        error_type=type(exc).__name__,
        error=exc.message,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Include Routers
app.include_router(health.router)
app.include_router(reports.router)
