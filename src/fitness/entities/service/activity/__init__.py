"""Entity package: Activity."""

from .entity import Activity, ActivityRequest, ActivityType
from .repository import ActivityRepository
from .table import ActivityTable

__all__ = [
    "Activity",
    "ActivityRequest",
    "ActivityRepository",
    "ActivityTable",
    "ActivityType",
]
