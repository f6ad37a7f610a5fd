"""Activity database table model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field

from src.fitness.entities._base import EntityTable


class ActivityTable(EntityTable, table=True):
    """Database persistence model for activities."""

    __tablename__ = "activity"

    user_id: str = Field(index=True)
    type: str
    duration: int
    calories_burned: int = 0
    start_time: datetime
    additional_metrics: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
