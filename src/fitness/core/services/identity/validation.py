"""Downstream identity validation."""

from loguru import logger

from src.fitness.core.clients.user_service import UserServiceClient
from src.fitness.core.errors import UserUnvalidated
from src.fitness.entities.core.user import UserProfile


class UserValidationService:
    """Confirms a user exists before a downstream service writes on their behalf.

    Any failure to get a well-formed profile back is an ``UserUnvalidated``;
    the caller must reject the business operation.
    """

    def __init__(self, client: UserServiceClient) -> None:
        self._client = client

    async def validate(self, external_id: str | None) -> UserProfile:
        if not external_id or not external_id.strip():
            raise UserUnvalidated(external_id, "no user id supplied")

        logger.info(f"Ensuring user exists before accepting write: {external_id}")
        try:
            profile = await self._client.ensure_exists(external_id)
        except Exception as exc:
            # timeouts, non-2xx statuses and malformed bodies alike
            logger.error(f"Failed to validate user {external_id}: {type(exc).__name__}: {exc}")
            raise UserUnvalidated(external_id, type(exc).__name__) from exc

        logger.info(f"User validated: {external_id} -> {profile.id}")
        return profile
