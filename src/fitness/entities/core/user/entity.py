"""User record domain entity."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.fitness.entities._base import Entity, ensure_utc, utc_now


class Role(StrEnum):
    USER = "USER"
    ADMIN = "ADMIN"


class UserRecord(Entity):
    """Canonical user record.

    ``id`` is the internal identity. ``external_id`` links the record to the
    identity provider subject and stays None for local-only accounts until a
    token asserting the same email binds it.
    """

    external_id: str | None = Field(
        default=None, description="Subject identifier asserted by the identity provider"
    )
    email: str | None = Field(default=None, description="User's email address")
    given_name: str | None = Field(default=None, description="User's first name")
    family_name: str | None = Field(default=None, description="User's last name")
    credential_hash: str | None = Field(
        default=None, description="Hashed local credential; None for provisioned records"
    )
    role: Role = Field(default=Role.USER, description="Authorization role")

    def touch(self) -> None:
        """Mark the record as modified now."""
        self.updated_at = max(utc_now(), ensure_utc(self.created_at))

    def to_profile(self) -> "UserProfile":
        return UserProfile(
            id=self.id,
            external_id=self.external_id,
            email=self.email,
            given_name=self.given_name,
            family_name=self.family_name,
            role=self.role,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class UserProfile(BaseModel):
    """Public-safe projection of a user record. Never carries the credential hash."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="internalId")
    external_id: str | None = Field(default=None, alias="externalId")
    email: str | None = None
    given_name: str | None = Field(default=None, alias="givenName")
    family_name: str | None = Field(default=None, alias="familyName")
    role: Role = Role.USER
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="modifiedAt")
