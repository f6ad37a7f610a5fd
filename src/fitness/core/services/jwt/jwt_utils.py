"""Helpers shared by token verification: unverified preview and claim mapping."""

import json
import re
from dataclasses import dataclass
from typing import Any

from authlib.common.encoding import urlsafe_b64decode
from fastapi import HTTPException

from src.fitness.core.models.claims import TokenClaims
from src.fitness.runtime.config.config_data import OIDCProviderConfig
from src.fitness.runtime.context import get_config

MAX_TOKEN_CHARS = 8192

# Three non-empty base64url segments, no padding
_COMPACT_JWT = re.compile(r"^([A-Za-z0-9_-]+)\.([A-Za-z0-9_-]+)\.([A-Za-z0-9_-]+)$")


def _reject(reason: str) -> HTTPException:
    return HTTPException(status_code=401, detail=reason)


def _decode_segment(segment: str, what: str) -> dict[str, Any]:
    try:
        decoded = json.loads(urlsafe_b64decode(segment.encode("ascii")))
    except (ValueError, UnicodeDecodeError) as exc:
        raise _reject(f"Malformed {what}") from exc
    if not isinstance(decoded, dict):
        raise _reject(f"{what} must be a JSON object")
    return decoded


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]
    alg: str | None
    kid: str | None
    iss: str | None


def preview_jwt(token: str) -> JwtPreview:
    """Decode header and payload without verifying anything.

    Only used to pick the issuer and key; nothing read here is trusted until
    ``JwtVerificationService`` has checked the signature.
    """
    if not token or len(token) > MAX_TOKEN_CHARS:
        raise _reject("Invalid JWT size")
    match = _COMPACT_JWT.match(token)
    if match is None:
        raise _reject("Invalid JWT format")

    header = _decode_segment(match.group(1), "JWT header")
    claims = _decode_segment(match.group(2), "JWT payload")
    iss = claims.get("iss")
    return JwtPreview(
        header=header,
        claims=claims,
        alg=header.get("alg"),
        kid=header.get("kid"),
        iss=iss.rstrip("/") if isinstance(iss, str) and iss else None,
    )


def lookup_config_by_issuer(issuer: str) -> OIDCProviderConfig | None:
    """Look up OIDC provider config by issuer URL."""
    config = get_config()

    for p in config.oidc.providers.values():
        if p.issuer.rstrip("/") == issuer.rstrip("/"):
            return p
    return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def create_token_claims(token: str, claims: dict[str, Any]) -> TokenClaims:
    """Map verified JWT claims onto TokenClaims.

    Profile claims that are not strings are dropped rather than coerced.
    """
    remaining_claims = dict(claims)

    subject = remaining_claims.pop("sub", "")
    issuer = remaining_claims.pop("iss", "") or ""
    audience = remaining_claims.pop("aud", [])
    expires_at = remaining_claims.pop("exp", None)
    issued_at = remaining_claims.pop("iat", None)
    email = _optional_str(remaining_claims.pop("email", None))
    email_verified = bool(remaining_claims.pop("email_verified", False))
    given_name = _optional_str(remaining_claims.pop("given_name", None))
    family_name = _optional_str(remaining_claims.pop("family_name", None))

    return TokenClaims(
        raw_token=token,
        issuer=str(issuer),
        subject=str(subject),
        audience=audience,
        expires_at=expires_at,
        issued_at=issued_at,
        email=email,
        email_verified=email_verified,
        given_name=given_name,
        family_name=family_name,
        custom_claims=remaining_claims,
    )
