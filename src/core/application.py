"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with all necessary middleware, exception handlers, and routers registered.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.adapters.api.v1 import api_router
from src.core.config.settings import settings
from src.core.handlers import register_exception_handlers
from src.core.lifecycle import create_lifespan_manager
from src.core.middleware import configure_middleware
from src.core.ratelimiter import limiter


def create_application() -> FastAPI:
    """Create and configure the FastAPI application.

    Interactive docs are only served outside production.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    expose_docs = settings.APP_ENV != "production"
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Identity federation and session issuing for the masterhub marketplace.",
        docs_url="/docs" if expose_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if expose_docs else None,
        lifespan=create_lifespan_manager(),
        default_response_class=JSONResponse,
    )

    # slowapi reads the limiter from app state when rendering 429s
    app.state.limiter = limiter

    configure_middleware(app)
    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    return app
