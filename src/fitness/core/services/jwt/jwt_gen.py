import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from src.fitness.runtime.context import get_config


class JwtGeneratorService:
    """Mints HS-signed tokens for the development issuer.

    Production tokens always come from the identity provider; this only exists
    so local environments and tests can exercise the identity sync path.
    """

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int = 3600,
        issuer: str | None = None,
        audience: str | list[str] | None = None,
        algorithm: str = "HS256",
        secret: str | None = None,
        kid: str | None = None,
    ) -> str:
        """Generate a signed JWT.

        Args:
            subject: Subject (sub) claim, the external identity
            claims: Additional claims such as email, given_name, family_name
            expires_in_seconds: Token lifetime in seconds (default: 1 hour)
            issuer: Issuer (iss) claim (defaults to the development issuer)
            audience: Audience (aud) claim
            algorithm: Signing algorithm (default: HS256)
            secret: Signing secret (defaults to the configured shared secret)
            kid: Optional Key ID for the JWT header

        Returns:
            Signed JWT token string

        Raises:
            ValueError: If no signing secret is available or encoding fails
        """
        config = get_config()
        secret = secret or config.jwt.shared_secret
        if not secret:
            raise ValueError("JWT signing secret not configured")

        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": issuer or config.jwt.dev_issuer,
            "sub": subject,
            "exp": now + expires_in_seconds,
            "iat": now,
            "nbf": now,
            "jti": generate_token(16),
        }
        if audience:
            payload["aud"] = audience

        if claims:
            payload.update(
                {
                    k: v
                    for k, v in claims.items()
                    if k not in {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}
                }
            )

        header = {"alg": algorithm, "typ": "JWT"}
        if kid:
            header["kid"] = kid

        try:
            token = jwt.encode(header, payload, secret)
        except JoseError as e:
            logger.error(f"JWT encoding failed: {e}")
            raise ValueError(f"JWT encoding failed: {e}") from e

        return token.decode() if isinstance(token, bytes) else token
