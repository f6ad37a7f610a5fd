"""Activity tracking for the downstream activity service."""

from loguru import logger

from src.fitness.core.services.identity.validation import UserValidationService
from src.fitness.entities.service.activity import (
    Activity,
    ActivityRepository,
    ActivityRequest,
)


class ActivityService:
    """Records workouts, but only for users the user-record service vouches for."""

    def __init__(
        self, repository: ActivityRepository, validator: UserValidationService
    ) -> None:
        self._repository = repository
        self._validator = validator

    async def track_activity(self, user_id: str, request: ActivityRequest) -> Activity:
        """Validate ``user_id`` and store the activity.

        Raises:
            UserUnvalidated: the user could not be confirmed; nothing is written.
        """
        await self._validator.validate(user_id)

        activity = Activity(
            user_id=user_id,
            type=request.type,
            duration=request.duration,
            calories_burned=request.calories_burned,
            start_time=request.start_time,
            additional_metrics=request.additional_metrics,
        )
        saved = self._repository.create(activity)
        logger.info(f"Tracked {saved.type} activity {saved.id} for user {user_id}")
        return saved

    def list_activities(self, user_id: str) -> list[Activity]:
        return self._repository.list_for_user(user_id)

    def get_activity(self, activity_id: str) -> Activity | None:
        return self._repository.get(activity_id)
