from datetime import UTC, datetime, timedelta

from sqlmodel import Session

from src.fitness.entities.service.activity import (
    Activity,
    ActivityRepository,
    ActivityType,
)


def _activity(user_id: str, start: datetime, **overrides) -> Activity:
    values = {
        "user_id": user_id,
        "type": ActivityType.RUNNING,
        "duration": 30,
        "calories_burned": 300,
        "start_time": start,
    }
    values.update(overrides)
    return Activity(**values)


class TestActivityRepository:
    def test_create_and_get(self, session: Session):
        repository = ActivityRepository(session)
        start = datetime(2024, 5, 1, 7, 30, tzinfo=UTC)

        created = repository.create(
            _activity("kc-1", start, additional_metrics={"distanceKm": 5.2})
        )

        loaded = repository.get(created.id)
        assert loaded == created
        assert loaded.type is ActivityType.RUNNING
        assert loaded.start_time == start
        assert loaded.additional_metrics == {"distanceKm": 5.2}

    def test_get_missing(self, session: Session):
        assert ActivityRepository(session).get("missing") is None

    def test_list_for_user_is_newest_first_and_scoped(self, session: Session):
        repository = ActivityRepository(session)
        base = datetime(2024, 5, 1, 7, 0, tzinfo=UTC)
        older = repository.create(_activity("kc-1", base))
        newer = repository.create(_activity("kc-1", base + timedelta(days=1)))
        repository.create(_activity("kc-2", base + timedelta(days=2)))

        activities = repository.list_for_user("kc-1")

        assert [a.id for a in activities] == [newer.id, older.id]
