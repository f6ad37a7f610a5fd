"""Record store client for canonical user records."""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from src.fitness.core.errors import UniqueConstraintViolation
from src.fitness.entities._base import ensure_utc

from .entity import UserRecord
from .table import UserTable


def _constraint_field(exc: IntegrityError) -> str:
    """Name the identity key a uniqueness failure was raised for.

    SQLite reports ``UNIQUE constraint failed: user_record.email`` while
    PostgreSQL reports the constraint name; both contain the column name.
    """
    message = str(exc.orig).lower()
    if "external_id" in message:
        return "external_id"
    if "email" in message:
        return "email"
    return "unknown"


class UserRepository:
    """Data-access layer for user records.

    Every operation is a single statement or a single committed transaction,
    so callers never observe a partially applied write.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, row: UserTable) -> UserRecord:
        record = UserRecord.model_validate(row, from_attributes=True)
        record.created_at = ensure_utc(record.created_at)
        record.updated_at = ensure_utc(record.updated_at)
        return record

    def _first(self, statement) -> UserRecord | None:
        row = self._session.exec(
            statement.execution_options(populate_existing=True)
        ).first()
        if row is None:
            return None
        return self._to_entity(row)

    def find_by_external_id(self, external_id: str) -> UserRecord | None:
        return self._first(select(UserTable).where(UserTable.external_id == external_id))

    def find_by_email(self, email: str) -> UserRecord | None:
        return self._first(select(UserTable).where(UserTable.email == email))

    def find_by_internal_id(self, internal_id: str) -> UserRecord | None:
        row = self._session.get(UserTable, internal_id, populate_existing=True)
        if row is None:
            return None
        return self._to_entity(row)

    def exists_by_external_id(self, external_id: str) -> bool:
        return self.find_by_external_id(external_id) is not None

    def upsert(self, record: UserRecord) -> UserRecord:
        """Insert the record, or update the row holding its id, and commit.

        Raises:
            UniqueConstraintViolation: another row already owns the external id or email.
        """
        row = self._session.get(UserTable, record.id)
        values = record.model_dump()
        values["role"] = str(record.role)
        if row is None:
            row = UserTable(**values)
            self._session.add(row)
        else:
            for key, value in values.items():
                if key != "id":
                    setattr(row, key, value)

        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            field = _constraint_field(exc)
            logger.debug(f"Upsert of user record {record.id} rejected on {field}")
            raise UniqueConstraintViolation(field) from exc

        self._session.refresh(row)
        return self._to_entity(row)
