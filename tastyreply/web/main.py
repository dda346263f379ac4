"""FastAPI application for the TastyReply dashboard backend."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from tastyreply import __version__
from tastyreply.ai.replies import ReplyGenerator
from tastyreply.core.config import Settings, get_settings
from tastyreply.core.errors import AppError
from tastyreply.core.logging import get_logger, get_request_id, setup_logging
from tastyreply.core.metrics import app_info, app_uptime_seconds, errors_total
from tastyreply.stores import build_review_store
from tastyreply.web.middleware import (
    PrometheusMiddleware,
    RateLimitMiddleware,
    RequestIdMiddleware,
)
from tastyreply.web.routers import ai, analytics, auth, google, healthcheck, reviews, sync, user

log = get_logger("tastyreply.web")


def _envelope(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            errors_total.labels(error_type=type(exc).__name__, component="web").inc()
            log.error(
                "request_failed",
                extra={
                    "path": str(request.url.path),
                    "method": request.method,
                    "error": exc.message,
                    "error_type": type(exc).__name__,
                },
            )
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _envelope(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        error = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return _envelope(exc.status_code, error)

    # Global exception handler for unhandled errors (500)
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", None) or get_request_id()
        errors_total.labels(error_type=type(exc).__name__, component="web").inc()
        log.error(
            "unhandled_exception",
            extra={
                "request_id": request_id,
                "path": str(request.url.path),
                "method": request.method,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
            exc_info=True,
        )
        extra = {"request_id": request_id}
        if request.app.state.settings.is_development:
            extra["message"] = str(exc)
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!", **extra)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API.

    The review store and reply generator are created on startup and kept on
    ``app.state``; routes reach them through ``tastyreply.web.deps``.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(level=settings.log_level, file_path=settings.log_file)
        app.state.review_store = build_review_store(settings)
        app.state.reply_generator = ReplyGenerator.from_settings(settings)
        app_info.labels(
            version=__version__,
            environment=settings.environment,
            store_backend=app.state.review_store.backend,
        ).set(1)
        log.info(
            "app_started",
            extra={"store": app.state.review_store.backend, "environment": settings.environment},
        )
        yield
        log.info("app_stopped")

    app = FastAPI(
        title="TastyReply API",
        version=__version__,
        description="Review aggregation and reply generation for restaurants",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.time()

    # Outermost last: CORS wraps everything so 429s carry CORS headers too
    app.add_middleware(
        RateLimitMiddleware,
        per_minute=settings.rate_limit_per_min,
        capacity=settings.rate_limit_capacity,
    )
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(healthcheck.router, tags=["Monitoring"])
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(user.router, prefix="/api", tags=["User"])
    app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
    app.include_router(sync.router, prefix="/api/sync", tags=["Sync"])
    app.include_router(google.router, prefix="/api/google", tags=["Google"])
    app.include_router(ai.router, prefix="/api/ai", tags=["AI"])
    app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])

    @app.get("/metrics")
    def metrics():
        """Prometheus metrics endpoint."""
        app_uptime_seconds.set(time.time() - app.state.started_at)
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("tastyreply.web.main:create_app", factory=True, host="0.0.0.0", port=5001)


if __name__ == "__main__":
    main()
