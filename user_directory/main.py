"""
FastAPI application entry point.
Mounts routes, Prometheus metrics, error handlers; selects the user store at startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Info, make_asgi_app

from user_directory.api.v1.router import api_router
from user_directory.config import get_settings
from user_directory.core.errors import install_error_handlers
from user_directory.core.logging_config import setup_logging
from user_directory.db.selection import select_user_store
from user_directory.services.directory_service import DirectoryService

logger = logging.getLogger(__name__)

STORE_INFO = Info("user_directory_store", "User store selected at startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: choose the user store once. Shutdown: release its connections."""
    store = await select_user_store(get_settings())
    STORE_INFO.info({"backend": store.kind})
    app.state.directory = DirectoryService(store)
    logger.info("User directory ready with %s store", store.kind)
    yield
    await store.close()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(
        title=settings.app_name,
        description="User directory: filtered, sorted, paginated user records over a durable or in-memory store.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Prometheus metrics at /metrics
    app.mount("/metrics", make_asgi_app())

    install_error_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
