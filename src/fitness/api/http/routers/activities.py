"""Activity service endpoints. Writes require a validated user."""

from fastapi import APIRouter, Depends, HTTPException, status

from src.fitness.api.http.deps import get_activity_service, get_trusted_user_id
from src.fitness.core.services import ActivityService
from src.fitness.entities.service.activity import Activity, ActivityRequest

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.post("", response_model=Activity, status_code=status.HTTP_201_CREATED)
async def track_activity(
    payload: ActivityRequest,
    user_id: str = Depends(get_trusted_user_id),
    service: ActivityService = Depends(get_activity_service),
) -> Activity:
    """Track an activity for the user identified by the trusted header."""
    return await service.track_activity(user_id, payload)


@router.get("", response_model=list[Activity])
def list_activities(
    user_id: str = Depends(get_trusted_user_id),
    service: ActivityService = Depends(get_activity_service),
) -> list[Activity]:
    """List the caller's activities, most recent first."""
    return service.list_activities(user_id)


@router.get("/{activity_id}", response_model=Activity)
def get_activity(
    activity_id: str,
    user_id: str = Depends(get_trusted_user_id),
    service: ActivityService = Depends(get_activity_service),
) -> Activity:
    activity = service.get_activity(activity_id)
    # Other users' activities are reported as missing
    if activity is None or activity.user_id != user_id:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Activity not found"},
        )
    return activity
