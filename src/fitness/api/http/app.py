"""User-record service: owns the canonical store and the provisioning endpoints."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.api.http.routers.health import router as health_router
from src.fitness.api.http.routers.users import router as users_router
from src.fitness.api.http.setup import build_app, install_request_logging
from src.fitness.api.utils.app_startup import configure_logging
from src.fitness.core.services import CredentialHasher, DbSessionService
from src.fitness.runtime.context import get_config

SERVICE_NAME = "user-service"


def build_dependencies() -> ApplicationDependencies:
    return ApplicationDependencies(
        database_service=DbSessionService(),
        credential_hasher=CredentialHasher(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.app_dependencies is None:
        app.state.app_dependencies = build_dependencies()
    deps: ApplicationDependencies = app.state.app_dependencies

    logger.info(
        "Starting {} in {} environment", SERVICE_NAME, get_config().app.environment
    )
    deps.database_service.create_all()
    try:
        yield
    finally:
        logger.info("Shutting down {}", SERVICE_NAME)
        deps.database_service.dispose()


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    app = build_app("Fitness user-record service", SERVICE_NAME, lifespan, dependencies)
    install_request_logging(app)
    app.include_router(health_router)
    app.include_router(users_router)
    return app


configure_logging(SERVICE_NAME)
app = create_app()

__all__ = ["app", "create_app"]


if __name__ == "__main__":
    import uvicorn

    # Access logging is handled by the request logging middleware
    uvicorn.run(app, host="0.0.0.0", port=8081, access_log=False)
