"""Status enum for maintenance records."""

from enum import Enum


class MaintenanceStatus(Enum):
    """Lifecycle state of a maintenance record."""

    COMPLETED = "Completed"
    SCHEDULED = "Scheduled"
