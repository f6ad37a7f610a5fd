"""Identity error taxonomy shared by the user-record service and its clients."""


class IdentityError(Exception):
    """Base class for identity reconciliation failures."""

    code = "identity_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class IdentityConflict(IdentityError):
    """The same email is already bound to a different external identity."""

    code = "identity_conflict"

    def __init__(
        self,
        email: str | None,
        bound_external_id: str | None,
        requested_external_id: str | None,
    ) -> None:
        super().__init__(
            f"Email {email} is already linked to another external identity"
        )
        self.email = email
        self.bound_external_id = bound_external_id
        self.requested_external_id = requested_external_id


class UniqueConstraintViolation(IdentityError):
    """A concurrent writer claimed the same external id or email first."""

    code = "unique_constraint_violation"

    def __init__(self, field: str) -> None:
        super().__init__(f"Unique constraint violated on {field}")
        self.field = field


class ReconciliationFailed(IdentityError):
    """Reconciliation could not reach a consistent outcome for this request."""

    code = "reconciliation_failed"


class UserUnvalidated(IdentityError):
    """A downstream caller could not confirm that the user exists."""

    code = "user_unvalidated"

    def __init__(self, external_id: str | None, reason: str) -> None:
        super().__init__(f"User could not be validated: {external_id} ({reason})")
        self.external_id = external_id
        self.reason = reason
