"""Activity service: a downstream consumer that validates users before writing."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.api.http.routers.activities import router as activities_router
from src.fitness.api.http.routers.health import router as health_router
from src.fitness.api.http.setup import build_app, install_request_logging
from src.fitness.api.utils.app_startup import configure_logging
from src.fitness.core.clients import UserServiceClient
from src.fitness.core.services import DbSessionService
from src.fitness.runtime.context import get_config

SERVICE_NAME = "activity-service"


def build_dependencies() -> ApplicationDependencies:
    config = get_config()
    return ApplicationDependencies(
        database_service=DbSessionService(),
        user_service_client=UserServiceClient(
            config.user_service.base_url, config.user_service.timeout_seconds
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.app_dependencies is None:
        app.state.app_dependencies = build_dependencies()
    deps: ApplicationDependencies = app.state.app_dependencies

    config = get_config()
    logger.info(
        "Starting {} in {} environment; validating users against {}",
        SERVICE_NAME,
        config.app.environment,
        config.user_service.base_url,
    )
    deps.database_service.create_all()
    try:
        yield
    finally:
        logger.info("Shutting down {}", SERVICE_NAME)
        deps.database_service.dispose()


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    app = build_app("Fitness activity service", SERVICE_NAME, lifespan, dependencies)
    app.state.user_service_critical = True
    install_request_logging(app)
    app.include_router(health_router)
    app.include_router(activities_router)
    return app


configure_logging(SERVICE_NAME)
app = create_app()

__all__ = ["app", "create_app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8082, access_log=False)
