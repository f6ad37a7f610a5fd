"""Provisioning entry points used by the user-record service endpoints."""

import hashlib
import re

from loguru import logger

from src.fitness.core.errors import IdentityConflict
from src.fitness.core.models.identity import (
    Conflict,
    IdentityAssertion,
    ReconcileOutcome,
)
from src.fitness.core.services.identity.reconciliation import (
    IdentityReconciliationEngine,
)
from src.fitness.entities.core.user import UserProfile, UserRepository

_SAFE_LOCAL_PART = re.compile(r"^[a-z0-9][a-z0-9._-]{0,63}$")
_HASHED_LOCAL_PART = re.compile(r"^ext-[0-9a-f]{32}$")


def placeholder_email(external_id: str, domain: str) -> str:
    """Deterministic stand-in email for a record known only by its external id.

    Distinct ids always map to distinct emails. An id is used verbatim only
    when it is already a lower-case safe local part that cannot be mistaken
    for a hashed one; anything else (upper case included) is replaced by a
    digest of the exact id.
    """
    if (
        _SAFE_LOCAL_PART.fullmatch(external_id)
        and ".." not in external_id
        and not _HASHED_LOCAL_PART.fullmatch(external_id)
    ):
        local_part = external_id
    else:
        digest = hashlib.sha256(external_id.encode("utf-8")).hexdigest()
        local_part = f"ext-{digest[:32]}"
    return f"{local_part}@{domain}"


class ProvisioningCoordinator:
    """Registration and ensure-exists semantics on top of the reconciliation engine."""

    def __init__(
        self,
        engine: IdentityReconciliationEngine,
        repository: UserRepository,
        placeholder_email_domain: str,
    ) -> None:
        self._engine = engine
        self._repository = repository
        self._placeholder_email_domain = placeholder_email_domain

    def register_outcome(
        self, assertion: IdentityAssertion, credential: str | None = None
    ) -> tuple[UserProfile, ReconcileOutcome]:
        """Reconcile and return the public profile along with the raw outcome.

        Raises:
            IdentityConflict: the email is bound to a different external identity.
            ReconciliationFailed: the store kept rejecting the write.
        """
        outcome = self._engine.reconcile(assertion, credential)
        if isinstance(outcome, Conflict):
            raise IdentityConflict(
                email=outcome.email,
                bound_external_id=outcome.bound_external_id,
                requested_external_id=outcome.requested_external_id,
            )
        logger.debug(
            f"Registration for {assertion.external_id or assertion.email} resolved as {type(outcome).__name__}"
        )
        return outcome.record.to_profile(), outcome

    def register(
        self, assertion: IdentityAssertion, credential: str | None = None
    ) -> UserProfile:
        profile, _ = self.register_outcome(assertion, credential)
        return profile

    def ensure_exists(self, external_id: str) -> UserProfile:
        """Return the profile bound to ``external_id``, creating a placeholder record if needed."""
        outcome = self._engine.provision(
            external_id, self.placeholder_email(external_id)
        )
        # provision() never yields a Conflict
        return outcome.record.to_profile()

    def exists(self, external_id: str) -> bool:
        return self._repository.exists_by_external_id(external_id)

    def placeholder_email(self, external_id: str) -> str:
        return placeholder_email(external_id, self._placeholder_email_domain)
