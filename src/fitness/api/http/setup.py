"""Application scaffolding shared by the three services."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.api.http.errors import register_exception_handlers
from src.fitness.api.http.middleware.request_logging import log_requests
from src.fitness.api.http.middleware.security import SecurityHeadersMiddleware
from src.fitness.runtime.context import get_config


def build_app(
    title: str,
    service_name: str,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]],
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Create a FastAPI app with security headers, CORS, request logging and error mapping.

    When ``dependencies`` is given it is installed immediately, which lets tests
    drive the app without running the lifespan.
    """
    config = get_config()
    is_production = config.app.environment == "production"

    app = FastAPI(
        title=title,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.service_name = service_name
    app.state.app_dependencies = dependencies
    # Readiness fails on an unreachable user-record service only where set
    app.state.user_service_critical = False

    app.add_middleware(SecurityHeadersMiddleware)

    if is_production and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    register_exception_handlers(app)
    return app


def install_request_logging(app: FastAPI) -> None:
    """Add the request logging middleware as the outermost layer."""
    app.middleware("http")(log_requests)
