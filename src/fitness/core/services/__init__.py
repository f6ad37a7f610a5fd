"""Core services exports."""

from .activity_service import ActivityService
from .database.db_session import DbSessionService
from .identity import (
    ClaimExtractor,
    CredentialHasher,
    IdentityReconciliationEngine,
    ProvisioningCoordinator,
    UserValidationService,
)
from .jwt.jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt.jwt_gen import JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService

__all__ = [
    # JWT Services
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "JwtGeneratorService",
    "JwtVerificationService",
    # Identity Services
    "ClaimExtractor",
    "CredentialHasher",
    "IdentityReconciliationEngine",
    "ProvisioningCoordinator",
    "UserValidationService",
    "ActivityService",
    # Database Service
    "DbSessionService",
]
