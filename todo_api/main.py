"""Main FastAPI application."""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .core.logging import configure_logging
from .core.rate_limit import RateLimiter, build_rate_limiter
from .database import init_db, close_db
from .schemas.common import HealthResponse
from .api.middleware import (
    BodySizeLimitMiddleware,
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    RateLimitingMiddleware,
    SecurityHeadersMiddleware,
    register_exception_handlers,
)
from .api.routes import todos, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging()
    await init_db()
    yield
    # Shutdown
    await close_db()


def create_app(rate_limiter: Optional[RateLimiter] = None) -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan
    )

    register_exception_handlers(app)

    # Add middleware (last added runs first)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.api.max_body_bytes)
    if rate_limiter is None and settings.api.rate_limit_enabled:
        rate_limiter = build_rate_limiter()
    if rate_limiter is not None:
        app.add_middleware(RateLimitingMiddleware, limiter=rate_limiter)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(users.router, prefix=settings.api.user_prefix)
    app.include_router(todos.router, prefix=settings.api.todo_prefix)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "message": settings.api.title,
            "version": settings.api.version,
            "status": "healthy"
        }

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="healthy", version=settings.api.version)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "todo_api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        workers=settings.api.workers if not settings.api.reload else 1,
    )
