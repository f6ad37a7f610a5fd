"""Verified token claims."""

from typing import Any

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Claims of a bearer token whose signature and registered claims were verified."""

    raw_token: str = Field(description="The verified compact JWT")
    issuer: str = Field(description="Token issuer (iss)")
    subject: str = Field(description="Token subject (sub)")
    audience: str | list[str] = Field(default_factory=list, description="Audience (aud)")
    expires_at: int | None = Field(default=None, description="Expiry timestamp (exp)")
    issued_at: int | None = Field(default=None, description="Issued-at timestamp (iat)")
    email: str | None = Field(default=None, description="Email claim")
    email_verified: bool = Field(default=False, description="Whether the issuer verified the email")
    given_name: str | None = Field(default=None, description="Given name claim")
    family_name: str | None = Field(default=None, description="Family name claim")
    custom_claims: dict[str, Any] = Field(
        default_factory=dict, description="Claims not mapped to a dedicated field"
    )
