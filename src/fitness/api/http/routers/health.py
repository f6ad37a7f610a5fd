"""Liveness and readiness probes shared by the three services."""

from typing import Any

from fastapi import APIRouter, Request
from loguru import logger
from starlette.responses import JSONResponse

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


def _status(ok: bool) -> str:
    return "healthy" if ok else "unhealthy"


def _database_kind() -> str:
    return "sqlite" if get_config().database.is_sqlite else "postgresql"


@router.get("")
async def health(request: Request) -> dict[str, str]:
    """Liveness: the process is up. Dependencies are not consulted."""
    return {"status": "healthy", "service": request.app.state.service_name}


async def _check_oidc(deps: ApplicationDependencies) -> tuple[dict[str, Any], bool]:
    config = get_config()
    results: dict[str, Any] = {}
    all_ok = True
    for name, provider in config.oidc.providers.items():
        entry: dict[str, Any] = {"issuer": provider.issuer}
        try:
            await deps.jwks_service.fetch_jwks(provider)
            entry["status"] = "healthy"
        except Exception as exc:
            logger.warning(f"JWKS for provider {name} unavailable: {exc}")
            entry.update(status="unhealthy", error=str(exc))
            all_ok = False
        results[name] = entry
    return results, all_ok


async def _check_user_service(deps: ApplicationDependencies) -> dict[str, Any]:
    try:
        reachable = await deps.user_service_client.ping()
    except Exception as exc:
        logger.warning(f"User-record service unreachable: {exc}")
        return {"status": "unhealthy", "error": str(exc)}
    return {"status": _status(reachable)}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness: 200 when every critical dependency answers, 503 otherwise.

    OIDC providers are critical only in production. The user-record service is
    critical only for services that refuse writes without it; the gateway
    forwards regardless.
    """
    deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()
    checks: dict[str, Any] = {}
    ready = True

    if deps.database_service is not None:
        db_ok = deps.database_service.health_check()
        checks["database"] = {"status": _status(db_ok), "type": _database_kind()}
        ready = ready and db_ok

    if deps.jwks_service is not None and config.oidc.providers:
        checks["oidc_providers"], oidc_ok = await _check_oidc(deps)
        if config.app.environment == "production":
            ready = ready and oidc_ok

    if deps.user_service_client is not None:
        user_service = await _check_user_service(deps)
        checks["user_service"] = user_service
        if request.app.state.user_service_critical:
            ready = ready and user_service["status"] == "healthy"

    body = {
        "status": "ready" if ready else "not_ready",
        "service": request.app.state.service_name,
        "environment": config.app.environment,
        "checks": checks,
    }
    return body if ready else JSONResponse(status_code=503, content=body)


@router.get("/database", response_model=None)
async def health_database(request: Request) -> dict[str, Any] | JSONResponse:
    """Database connectivity plus connection pool counters."""
    deps: ApplicationDependencies = request.app.state.app_dependencies
    if deps.database_service is None:
        return {"status": "disabled", "note": "This service has no database"}

    healthy = deps.database_service.health_check()
    body = {
        "status": _status(healthy),
        "type": _database_kind(),
        "pool": deps.database_service.get_pool_status(),
    }
    return body if healthy else JSONResponse(status_code=503, content=body)
