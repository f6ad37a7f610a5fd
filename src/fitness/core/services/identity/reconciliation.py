"""Identity reconciliation: match an asserted identity to one canonical record."""

from collections.abc import Callable

from loguru import logger

from src.fitness.core.errors import ReconciliationFailed, UniqueConstraintViolation
from src.fitness.core.models.identity import (
    Conflict,
    Created,
    Existing,
    IdentityAssertion,
    ReconcileOutcome,
    Updated,
)
from src.fitness.core.services.identity.credentials import CredentialHasher
from src.fitness.entities._base import utc_now
from src.fitness.entities.core.user import Role, UserRecord, UserRepository

_PROFILE_FIELDS = ("given_name", "family_name")


class IdentityReconciliationEngine:
    """Decides whether an assertion matches, updates, creates or conflicts.

    Lookups run external id first, then email, then fall through to creation.
    The lookups and the write are not one transaction: the store's unique
    constraints arbitrate concurrent requests, and a rejected write is retried
    exactly once from the top, where the competing row is now visible.
    """

    def __init__(self, repository: UserRepository, hasher: CredentialHasher) -> None:
        self._repository = repository
        self._hasher = hasher

    def reconcile(
        self, assertion: IdentityAssertion, credential: str | None = None
    ) -> ReconcileOutcome:
        """Reconcile ``assertion`` against the store.

        Raises:
            ReconciliationFailed: the write lost a uniqueness race twice.
        """
        subject = assertion.external_id or assertion.email or "<anonymous>"
        return self._with_single_retry(
            lambda: self._reconcile_once(assertion, credential), subject
        )

    def provision(self, external_id: str, placeholder_email: str) -> ReconcileOutcome:
        """Find the record bound to ``external_id`` or create a minimal one.

        Never consults the email index, so it cannot produce a conflict.
        """
        return self._with_single_retry(
            lambda: self._provision_once(external_id, placeholder_email), external_id
        )

    def _with_single_retry(
        self, attempt: Callable[[], ReconcileOutcome], subject: str
    ) -> ReconcileOutcome:
        try:
            return attempt()
        except UniqueConstraintViolation as exc:
            logger.warning(
                f"Concurrent write claimed {exc.field} while reconciling {subject}; retrying once"
            )

        try:
            return attempt()
        except UniqueConstraintViolation as exc:
            logger.error(
                f"Reconciliation of {subject} failed twice on {exc.field}; giving up"
            )
            raise ReconciliationFailed(
                f"Could not reconcile identity {subject}: {exc.field} kept colliding"
            ) from exc

    def _reconcile_once(
        self, assertion: IdentityAssertion, credential: str | None
    ) -> ReconcileOutcome:
        if assertion.external_id:
            record = self._repository.find_by_external_id(assertion.external_id)
            if record is not None:
                return self._merge_bound_record(record, assertion)

        if assertion.email:
            record = self._repository.find_by_email(assertion.email)
            if record is not None:
                return self._link_by_email(record, assertion)

        return self._create(assertion, credential)

    def _merge_bound_record(
        self, record: UserRecord, assertion: IdentityAssertion
    ) -> ReconcileOutcome:
        changed: list[str] = []
        warnings: list[str] = []

        if assertion.email and assertion.email != record.email:
            holder = self._repository.find_by_email(assertion.email)
            if holder is not None and holder.id != record.id:
                # Non-fatal here, unlike the email-first branch
                message = (
                    f"Email {assertion.email} belongs to record {holder.id}; "
                    f"keeping {record.email} on record {record.id}"
                )
                logger.warning(message)
                warnings.append(message)
            else:
                record.email = assertion.email
                changed.append("email")

        for field in _PROFILE_FIELDS:
            value = getattr(assertion, field)
            if value and value != getattr(record, field):
                setattr(record, field, value)
                changed.append(field)

        if not changed:
            return Existing(record, tuple(warnings))

        record.touch()
        saved = self._repository.upsert(record)
        logger.info(
            f"Updated record {saved.id} for external id {assertion.external_id}: {', '.join(changed)}"
        )
        return Updated(saved, tuple(changed), tuple(warnings))

    def _link_by_email(
        self, record: UserRecord, assertion: IdentityAssertion
    ) -> ReconcileOutcome:
        if record.external_id is not None:
            if record.external_id == assertion.external_id:
                return Existing(record)

            logger.warning(
                f"Conflict: email {record.email} is bound to external id {record.external_id}, "
                f"request asserts {assertion.external_id}"
            )
            return Conflict(
                email=record.email,
                bound_external_id=record.external_id,
                requested_external_id=assertion.external_id,
            )

        changed: list[str] = []
        if assertion.external_id:
            record.external_id = assertion.external_id
            changed.append("external_id")

        # Only backfill names the local account never set
        for field in _PROFILE_FIELDS:
            value = getattr(assertion, field)
            if value and not getattr(record, field):
                setattr(record, field, value)
                changed.append(field)

        if not changed:
            return Existing(record)

        record.touch()
        saved = self._repository.upsert(record)
        logger.info(
            f"Linked record {saved.id} ({saved.email}) to external id {saved.external_id}"
        )
        return Updated(saved, tuple(changed))

    def _create(
        self, assertion: IdentityAssertion, credential: str | None
    ) -> ReconcileOutcome:
        now = utc_now()
        record = UserRecord(
            external_id=assertion.external_id,
            email=assertion.email,
            given_name=assertion.given_name,
            family_name=assertion.family_name,
            credential_hash=self._hasher.hash(credential) if credential else None,
            role=Role.USER,
            created_at=now,
            updated_at=now,
        )
        saved = self._repository.upsert(record)
        logger.info(
            f"Created record {saved.id} for external id {saved.external_id} (email={saved.email})"
        )
        return Created(saved)

    def _provision_once(self, external_id: str, placeholder_email: str) -> ReconcileOutcome:
        record = self._repository.find_by_external_id(external_id)
        if record is not None:
            return Existing(record)
        return self._create(
            IdentityAssertion(external_id=external_id, email=placeholder_email), None
        )
