"""
Career Coach Gateway
FastAPI application relaying career coach chats to the AI gateway.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from career_coach import __version__
from career_coach.api.routers import api_router
from career_coach.config.settings import Settings, current_gateway_api_key, get_settings
from career_coach.middleware.error_handling import ErrorHandlingMiddleware
from career_coach.middleware.request_logging import RequestLoggingMiddleware
from career_coach.utils.rate_limiter import RateLimiters


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    rate_limiters: Optional[RateLimiters] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan context manager."""
        # Startup
        logging.info(f"Starting {settings.app_name} ({settings.environment})")

        if not current_gateway_api_key(settings):
            logging.error("AI gateway credential missing! Check AI_GATEWAY_API_KEY")
        if not settings.supabase_url or not settings.supabase_key:
            logging.error("Supabase configuration missing! Check SUPABASE_URL and SUPABASE_KEY")

        owns_client = http_client is None
        app.state.http_client = http_client or httpx.AsyncClient(
            timeout=settings.ai_gateway_timeout_seconds
        )

        yield

        # Shutdown
        logging.info("Shutting down...")
        if owns_client:
            await app.state.http_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        description="Streaming relay between the career coach client and the AI gateway",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    # Process-local rate limit tables, shared by every request of this app
    app.state.rate_limiters = rate_limiters or RateLimiters.from_settings(settings)

    # CORS is resolved per request by the career coach controller
    app.add_middleware(ErrorHandlingMiddleware)
    if settings.enable_request_logging:
        app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router)

    return app


configure_logging(get_settings())
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().is_local,
    )
