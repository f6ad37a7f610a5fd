from .jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt_gen import JwtGeneratorService
from .jwt_verify import JwtVerificationService

__all__ = [
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "JwtGeneratorService",
    "JwtVerificationService",
]
