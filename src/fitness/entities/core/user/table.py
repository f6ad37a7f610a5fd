"""User record database table model."""

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from src.fitness.entities._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for user records.

    The unique constraints are the only serialization point between concurrent
    provisioning requests; the application never takes a lock of its own.
    """

    __tablename__ = "user_record"
    __table_args__ = (
        UniqueConstraint("external_id", name="uq_user_record_external_id"),
        UniqueConstraint("email", name="uq_user_record_email"),
    )

    external_id: str | None = Field(default=None, index=True)
    email: str | None = Field(default=None, index=True)
    given_name: str | None = None
    family_name: str | None = None
    credential_hash: str | None = None
    role: str = Field(default="USER")
