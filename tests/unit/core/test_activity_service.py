"""Tests for activity tracking behind user validation."""

from datetime import UTC, datetime

import pytest
from sqlmodel import Session

from src.fitness.core.errors import UserUnvalidated
from src.fitness.core.services import ActivityService
from src.fitness.entities.core.user import UserProfile
from src.fitness.entities.service.activity import (
    ActivityRepository,
    ActivityRequest,
    ActivityType,
)


class FakeValidator:
    def __init__(self, valid: bool) -> None:
        self.valid = valid
        self.calls: list[str] = []

    async def validate(self, external_id: str) -> UserProfile:
        self.calls.append(external_id)
        if not self.valid:
            raise UserUnvalidated(external_id, "HTTPStatusError")
        now = datetime.now(UTC)
        return UserProfile(
            id="internal-1", external_id=external_id, created_at=now, updated_at=now
        )


REQUEST = ActivityRequest(
    type=ActivityType.CYCLING,
    duration=45,
    calories_burned=420,
    start_time=datetime(2024, 5, 1, 7, 30, tzinfo=UTC),
    additional_metrics={"avgHeartRate": 141},
)


class TestActivityService:
    async def test_tracks_activity_for_validated_user(self, session: Session):
        validator = FakeValidator(valid=True)
        service = ActivityService(ActivityRepository(session), validator)

        activity = await service.track_activity("kc-1", REQUEST)

        assert validator.calls == ["kc-1"]
        assert activity.user_id == "kc-1"
        assert activity.type is ActivityType.CYCLING
        assert activity.additional_metrics == {"avgHeartRate": 141}
        assert service.list_activities("kc-1") == [activity]
        assert service.get_activity(activity.id) == activity

    async def test_unvalidated_user_writes_nothing(self, session: Session):
        service = ActivityService(ActivityRepository(session), FakeValidator(valid=False))

        with pytest.raises(UserUnvalidated):
            await service.track_activity("kc-1", REQUEST)

        assert service.list_activities("kc-1") == []
