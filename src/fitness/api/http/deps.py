"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import httpx
from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.fitness.api.http.app_data import ApplicationDependencies
from src.fitness.core.clients import UserServiceClient
from src.fitness.core.services import (
    ActivityService,
    ClaimExtractor,
    CredentialHasher,
    IdentityReconciliationEngine,
    ProvisioningCoordinator,
    UserValidationService,
)
from src.fitness.entities.core.user import UserRepository
from src.fitness.entities.service.activity import ActivityRepository
from src.fitness.runtime.context import get_config


def _dependency(request: Request, name: str) -> Any:
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    value = getattr(app_deps, name)
    if value is None:
        raise RuntimeError(f"{name} is not configured for this service")
    return value


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session for the duration of the request."""
    session = _dependency(request, "database_service").get_session()
    try:
        yield session
    finally:
        session.close()


def get_credential_hasher(request: Request) -> CredentialHasher:
    return _dependency(request, "credential_hasher")


def get_claim_extractor(request: Request) -> ClaimExtractor:
    return _dependency(request, "claim_extractor")


def get_user_service_client(request: Request) -> UserServiceClient:
    return _dependency(request, "user_service_client")


def get_proxy_client(request: Request) -> httpx.AsyncClient:
    return _dependency(request, "proxy_client")


def get_user_repository(db: Session = Depends(get_db_session)) -> UserRepository:
    return UserRepository(db)


def get_reconciliation_engine(
    repository: UserRepository = Depends(get_user_repository),
    hasher: CredentialHasher = Depends(get_credential_hasher),
) -> IdentityReconciliationEngine:
    return IdentityReconciliationEngine(repository, hasher)


def get_provisioning_coordinator(
    engine: IdentityReconciliationEngine = Depends(get_reconciliation_engine),
    repository: UserRepository = Depends(get_user_repository),
) -> ProvisioningCoordinator:
    """Get the provisioning coordinator bound to this request's session."""
    return ProvisioningCoordinator(
        engine, repository, get_config().identity.placeholder_email_domain
    )


def get_user_validation_service(
    client: UserServiceClient = Depends(get_user_service_client),
) -> UserValidationService:
    return UserValidationService(client)


def get_activity_repository(db: Session = Depends(get_db_session)) -> ActivityRepository:
    return ActivityRepository(db)


def get_activity_service(
    repository: ActivityRepository = Depends(get_activity_repository),
    validator: UserValidationService = Depends(get_user_validation_service),
) -> ActivityService:
    return ActivityService(repository, validator)


def get_trusted_user_id(request: Request) -> str:
    """Read the external user id stamped on the request by the gateway."""
    header = get_config().identity.trusted_header
    raw = request.headers.get(header) or ""
    # Starlette decodes header bytes as latin-1; the gateway writes UTF-8
    try:
        user_id = raw.encode("latin-1").decode("utf-8").strip()
    except UnicodeDecodeError:
        user_id = raw.strip()
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail={"code": "missing_user", "message": f"Missing {header} header"},
        )
    return user_id
