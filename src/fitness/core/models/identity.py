"""Identity assertions and reconciliation outcomes."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, field_validator

from src.fitness.entities.core.user import UserRecord


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_email(value: str | None) -> str | None:
    value = blank_to_none(value)
    return value.lower() if value else None


class IdentityAssertion(BaseModel):
    """Who a request claims to be, as asserted by a verified token.

    ``external_id`` is always set when the assertion comes from a token. It is
    None only for local self-registration, which has no external identity yet.
    """

    model_config = ConfigDict(frozen=True)

    external_id: str | None = None
    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None

    @field_validator("external_id", "given_name", "family_name", mode="before")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return blank_to_none(value)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: str | None) -> str | None:
        return normalize_email(value)


@dataclass(frozen=True)
class NoAssertion:
    """No usable identity on the request. Routine, not a failure."""

    reason: str


@dataclass(frozen=True)
class Existing:
    """Matched a canonical record that needed no change."""

    record: UserRecord
    warnings: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class Updated:
    """Matched a canonical record and persisted merged fields."""

    record: UserRecord
    changed_fields: tuple[str, ...] = ()
    warnings: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class Created:
    """No record matched; a new canonical record was persisted."""

    record: UserRecord


@dataclass(frozen=True)
class Conflict:
    """The asserted email is bound to a different external identity."""

    email: str | None
    bound_external_id: str | None
    requested_external_id: str | None


ReconcileOutcome = Existing | Updated | Created | Conflict
