"""API gateway: identity sync on every request, then forward to the owning service."""

import asyncio
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from loguru import logger

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.api.http.middleware.identity_sync import IdentitySyncMiddleware
from src.fitness.api.http.routers.health import router as health_router
from src.fitness.api.http.routers.proxy import router as proxy_router
from src.fitness.api.http.setup import build_app, install_request_logging
from src.fitness.api.utils.app_startup import configure_logging
from src.fitness.core.clients import UserServiceClient
from src.fitness.core.services import (
    ClaimExtractor,
    JWKSCacheInMemory,
    JwksService,
    JwtVerificationService,
)
from src.fitness.runtime.context import get_config

SERVICE_NAME = "gateway"


def build_dependencies() -> ApplicationDependencies:
    config = get_config()
    jwks_cache = JWKSCacheInMemory()
    jwks_service = JwksService(jwks_cache)
    jwt_verify_service = JwtVerificationService(jwks_service)
    return ApplicationDependencies(
        jwks_cache=jwks_cache,
        jwks_service=jwks_service,
        jwt_verify_service=jwt_verify_service,
        claim_extractor=ClaimExtractor(jwt_verify_service),
        user_service_client=UserServiceClient(
            config.user_service.base_url, config.user_service.timeout_seconds
        ),
        proxy_client=httpx.AsyncClient(timeout=config.gateway.forward_timeout_seconds),
    )


async def _warm_jwks(deps: ApplicationDependencies) -> None:
    """Fetch every provider's JWKS once so misconfiguration surfaces at startup."""
    config = get_config()
    providers = list(config.oidc.providers.values())
    if not providers or deps.jwks_service is None:
        return

    results = await asyncio.gather(
        *(deps.jwks_service.fetch_jwks(p) for p in providers), return_exceptions=True
    )
    errors = [
        (p.issuer, str(err))
        for p, err in zip(providers, results, strict=True)
        if isinstance(err, Exception)
    ]
    for issuer, err in errors:
        logger.error("Failed to fetch JWKS for issuer {}: {}", issuer, err)
    if errors and config.app.environment == "production":
        raise RuntimeError(f"JWKS readiness check failed for issuers: {errors}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.app_dependencies is None:
        app.state.app_dependencies = build_dependencies()
    deps: ApplicationDependencies = app.state.app_dependencies

    config = get_config()
    logger.info(
        "Starting {} in {} environment with routes {}",
        SERVICE_NAME,
        config.app.environment,
        config.gateway.routes,
    )
    await _warm_jwks(deps)
    try:
        yield
    finally:
        logger.info("Shutting down {}", SERVICE_NAME)
        if deps.proxy_client is not None:
            await deps.proxy_client.aclose()


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    config = get_config()
    app = build_app("Fitness API gateway", SERVICE_NAME, lifespan, dependencies)

    def _deps() -> ApplicationDependencies:
        return app.state.app_dependencies

    app.add_middleware(
        IdentitySyncMiddleware,
        extractor_factory=lambda: _deps().claim_extractor,
        client_factory=lambda: _deps().user_service_client,
        header_name=config.identity.trusted_header,
        timeout=config.gateway.provisioning_timeout_seconds,
    )
    install_request_logging(app)

    # Health must be registered ahead of the catch-all proxy route
    app.include_router(health_router)
    app.include_router(proxy_router)
    return app


configure_logging(SERVICE_NAME)
app = create_app()

__all__ = ["app", "create_app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080, access_log=False)
