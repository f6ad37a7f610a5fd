"""JWT verification service."""

import time

from authlib.jose import JoseError, JsonWebKey, jwt
from fastapi import HTTPException
from loguru import logger

from src.fitness.core.models.claims import TokenClaims
from src.fitness.core.services.jwt.jwks import JwksService
from src.fitness.core.services.jwt.jwt_utils import (
    JwtPreview,
    create_token_claims,
    lookup_config_by_issuer,
    preview_jwt,
)
from src.fitness.runtime.context import get_config


def _as_list(v):
    return [v] if isinstance(v, str) else list(v or ())


class JwtVerificationService:
    """Verifies bearer tokens from configured OIDC providers.

    Tokens from a listed issuer are checked against the provider's JWKS.
    Outside production, HS-signed tokens from the configured development
    issuer are accepted with the shared secret. Every failure is reported as
    an ``HTTPException`` with status 401 (500 when keys cannot be fetched).
    """

    def __init__(self, jwks_service: JwksService):
        self._jwks_service = jwks_service

    async def verify_jwt(
        self,
        token: str,
        *,
        expected_audience: list[str] | str | None = None,
        preview: JwtPreview | None = None,
    ) -> TokenClaims:
        cfg = get_config()
        pv = preview or preview_jwt(token)

        if pv.alg not in cfg.jwt.allowed_algorithms:
            raise HTTPException(status_code=401, detail="Disallowed JWT algorithm")
        if not pv.iss:
            raise HTTPException(status_code=401, detail="Missing iss claim")

        provider_cfg = lookup_config_by_issuer(pv.iss)
        if provider_cfg is not None:
            aud_values = _as_list(
                expected_audience or cfg.jwt.audiences or provider_cfg.client_id
            )
            if not aud_values:
                raise HTTPException(
                    status_code=401, detail="No expected audience configured"
                )
            claims_options = {
                "iss": {"essential": True, "values": [provider_cfg.issuer.rstrip("/")]},
                "aud": {"essential": True, "values": aud_values},
            }

            jwks = await self._jwks_service.fetch_jwks(provider_cfg)
            jwk_set = (
                {"keys": [k for k in jwks.get("keys", []) if k.get("kid") == pv.kid]}
                if pv.kid
                else jwks
            )
            if pv.kid and not jwk_set.get("keys"):
                raise HTTPException(status_code=401, detail=f"No JWK matches kid={pv.kid}")
            verification_key = JsonWebKey.import_key_set(jwk_set)
        elif self._accepts_shared_secret(pv):
            claims_options = {"iss": {"essential": True, "values": [cfg.jwt.dev_issuer]}}
            verification_key = cfg.jwt.shared_secret
        else:
            raise HTTPException(status_code=401, detail=f"Unknown issuer: {pv.iss}")

        try:
            logger.debug(f"Verifying JWT from issuer {pv.iss}")
            claims = jwt.decode(token, verification_key, claims_options=claims_options)
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            raise HTTPException(status_code=401, detail=f"JWT error: {exc}") from exc

        # authlib only checks exp/nbf when present; iat must not be in the future
        now = int(time.time())
        iat = claims.get("iat")
        if iat is not None and int(iat) > now + cfg.jwt.clock_skew:
            raise HTTPException(status_code=401, detail="Invalid iat with skew")

        if not claims.get("sub"):
            raise HTTPException(status_code=401, detail="Missing sub claim")

        return create_token_claims(token=token, claims=dict(claims))

    def _accepts_shared_secret(self, pv: JwtPreview) -> bool:
        cfg = get_config()
        return (
            cfg.app.environment != "production"
            and bool(cfg.jwt.shared_secret)
            and pv.iss == cfg.jwt.dev_issuer.rstrip("/")
            and (pv.alg or "").startswith("HS")
        )
