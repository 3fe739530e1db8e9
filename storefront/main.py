"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.api.middleware.error_handler import error_handler_middleware
from storefront.api.middleware.latency_logging import latency_logging_middleware
from storefront.api.middleware.request_size import request_size_limit_middleware
from storefront.api.routes import (
    address,
    auth,
    basket,
    catalog,
    cron,
    health,
    orders,
    payments,
    sessions,
)
from storefront.core.config import get_settings
from storefront.core.http import shutdown_http_clients

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to the application.
    """
    settings = get_settings()
    logger.info("Starting %s in %s mode", settings.app_name, settings.app_env)
    if settings.postnord_use_fixture:
        logger.warning("PostNord fixture enabled, service points are not live")

    yield

    await shutdown_http_clients()
    logger.info("Upstream HTTP clients closed")
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Mixed Energy API",
        description="Storefront backend: catalog, basket, checkout and QuickPay payments",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-session-id"],
    )

    # Middleware added last runs first: latency logging sees the final status
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_size_limit_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=latency_logging_middleware)

    # Mount health routes at root level (no prefix)
    app.include_router(health.router)

    api_router = APIRouter(prefix="/api")

    # Session and basket routes
    api_router.include_router(sessions.router)
    api_router.include_router(basket.router)

    # Catalog and pricing routes
    api_router.include_router(catalog.router)

    # Checkout: address, pickup points, orders and payments
    api_router.include_router(address.router)
    api_router.include_router(orders.router)
    api_router.include_router(payments.router)

    api_router.include_router(auth.router)
    api_router.include_router(cron.router)

    app.include_router(api_router)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
