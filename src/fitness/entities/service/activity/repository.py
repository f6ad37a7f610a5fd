"""Data access for tracked activities."""

from sqlmodel import Session, col, select

from src.fitness.entities._base import ensure_utc

from .entity import Activity
from .table import ActivityTable


class ActivityRepository:
    """Data-access layer for activities."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, row: ActivityTable) -> Activity:
        activity = Activity.model_validate(row, from_attributes=True)
        activity.start_time = ensure_utc(activity.start_time)
        activity.created_at = ensure_utc(activity.created_at)
        activity.updated_at = ensure_utc(activity.updated_at)
        return activity

    def create(self, activity: Activity) -> Activity:
        values = activity.model_dump()
        values["type"] = str(activity.type)
        row = ActivityTable(**values)
        self._session.add(row)
        self._session.commit()
        self._session.refresh(row)
        return self._to_entity(row)

    def get(self, activity_id: str) -> Activity | None:
        row = self._session.get(ActivityTable, activity_id)
        if row is None:
            return None
        return self._to_entity(row)

    def list_for_user(self, user_id: str) -> list[Activity]:
        statement = (
            select(ActivityTable)
            .where(ActivityTable.user_id == user_id)
            .order_by(col(ActivityTable.start_time).desc(), col(ActivityTable.created_at).desc())
        )
        return [self._to_entity(row) for row in self._session.exec(statement).all()]
