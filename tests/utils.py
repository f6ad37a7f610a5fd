import base64
import time
from typing import Any

from authlib.jose import jwt


def oct_jwk(key: bytes, kid: str) -> dict[str, str]:
    return {
        "kty": "oct",
        "k": base64.urlsafe_b64encode(key).rstrip(b"=").decode("ascii"),
        "alg": "HS256",
        "kid": kid,
    }


def sign_token(
    key: bytes | str,
    *,
    issuer: str,
    subject: str | None,
    audience: str | None = None,
    kid: str | None = None,
    expires_in: int = 300,
    **claims: Any,
) -> str:
    """Sign an HS256 token with arbitrary claims."""
    now = int(time.time())
    payload: dict[str, Any] = {"iss": issuer, "iat": now, "exp": now + expires_in}
    if subject is not None:
        payload["sub"] = subject
    if audience is not None:
        payload["aud"] = audience
    payload.update(claims)

    header = {"alg": "HS256", "typ": "JWT"}
    if kid:
        header["kid"] = kid
    token = jwt.encode(header, payload, key)
    return token.decode() if isinstance(token, bytes) else token
