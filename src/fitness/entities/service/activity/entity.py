"""Entity: Activity."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.fitness.entities._base import Entity


class ActivityType(StrEnum):
    RUNNING = "RUNNING"
    WALKING = "WALKING"
    CYCLING = "CYCLING"
    SWIMMING = "SWIMMING"
    WEIGHT_TRAINING = "WEIGHT_TRAINING"
    YOGA = "YOGA"
    HIIT = "HIIT"
    CARDIO = "CARDIO"
    STRETCHING = "STRETCHING"
    OTHER = "OTHER"


class ActivityRequest(BaseModel):
    """Payload accepted when a user tracks a workout."""

    model_config = ConfigDict(populate_by_name=True)

    type: ActivityType
    duration: int = Field(ge=0, description="Duration in minutes")
    calories_burned: int = Field(default=0, ge=0, alias="caloriesBurned")
    start_time: datetime = Field(alias="startTime")
    additional_metrics: dict[str, Any] = Field(
        default_factory=dict, alias="additionalMetrics"
    )


class Activity(Entity):
    """A tracked workout, owned by the external user id that recorded it."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", description="External id of the owning user")
    type: ActivityType
    duration: int = Field(description="Duration in minutes")
    calories_burned: int = Field(default=0, alias="caloriesBurned")
    start_time: datetime = Field(alias="startTime")
    additional_metrics: dict[str, Any] = Field(
        default_factory=dict, alias="additionalMetrics"
    )
