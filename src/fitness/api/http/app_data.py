from dataclasses import dataclass

import httpx

from src.fitness.core.clients import UserServiceClient
from src.fitness.core.services import (
    ClaimExtractor,
    CredentialHasher,
    DbSessionService,
    JWKSCacheInMemory,
    JwksService,
    JwtVerificationService,
)


@dataclass
class ApplicationDependencies:
    """Process-wide collaborators, built once at startup.

    Each service only populates what it uses: the user-record service owns the
    database, the gateway owns token verification and the proxy client, and
    the activity service owns its database plus a user-service client.
    """

    database_service: DbSessionService | None = None
    credential_hasher: CredentialHasher | None = None
    jwks_cache: JWKSCacheInMemory | None = None
    jwks_service: JwksService | None = None
    jwt_verify_service: JwtVerificationService | None = None
    claim_extractor: ClaimExtractor | None = None
    user_service_client: UserServiceClient | None = None
    proxy_client: httpx.AsyncClient | None = None
