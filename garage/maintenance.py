"""MaintenanceRecord class for service events."""

import math
from datetime import date as date_type
from typing import Any, Dict, Optional, Union

from dateutil.parser import isoparse

from .outcome import Outcome
from .status import MaintenanceStatus

DATE_NOT_SET = "date not set"
VALID_STATUSES = tuple(s.value for s in MaintenanceStatus)


def _as_number(value: Any) -> Optional[float]:
    """Coerce a cost value to float, None when it isn't a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class MaintenanceRecord:
    """A completed or scheduled service on a vehicle."""

    def __init__(
        self,
        date: Union[str, date_type, None],
        service_type: str,
        cost: Optional[float] = None,
        description: Optional[str] = "",
        status: str = MaintenanceStatus.COMPLETED.value,
    ):
        if isinstance(date, date_type):
            date = date.isoformat()
        if isinstance(status, MaintenanceStatus):
            status = status.value
        self.date = date
        self.service_type = service_type
        self.cost = cost
        self.description = description or ""
        self.status = status

    def __repr__(self) -> str:
        return (
            f"MaintenanceRecord({self.date!r}, {self.service_type!r}, "
            f"cost={self.cost!r}, status={self.status!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MaintenanceRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def is_completed(self) -> bool:
        return self.status == MaintenanceStatus.COMPLETED.value

    @property
    def is_scheduled(self) -> bool:
        return self.status == MaintenanceStatus.SCHEDULED.value

    def date_or_none(self) -> Optional[date_type]:
        """Parsed calendar date, or None when missing or unparsable."""
        if not self.date or not isinstance(self.date, str):
            return None
        try:
            return isoparse(self.date).date()
        except (ValueError, OverflowError):
            return None

    def validate(self, today: Optional[date_type] = None) -> Outcome:
        """
        Check the record against the completed/scheduled rules.

        Returns the first failure found, in the order: service type, date
        presence, date format, future completed date, completed cost, status.
        """
        today = today or date_type.today()

        if not self.service_type or not str(self.service_type).strip():
            return Outcome.fail("Service type cannot be empty.")
        if not self.date:
            return Outcome.fail("Maintenance date is required.")
        parsed = self.date_or_none()
        if parsed is None:
            return Outcome.fail("Invalid date format. Use YYYY-MM-DD.")
        if self.is_completed and parsed > today:
            return Outcome.fail("A completed maintenance cannot have a future date.")
        if self.is_completed:
            cost = _as_number(self.cost)
            if cost is None or cost < 0:
                return Outcome.fail(
                    "Invalid cost for completed maintenance. "
                    "It must be a positive number or zero."
                )
        if self.status not in VALID_STATUSES:
            return Outcome.fail(f"Invalid maintenance status: {self.status!r}.")
        return Outcome.success()

    def format(self) -> str:
        """Render as 'Type on dd/mm/yyyy - R$cost (description) [Status]'."""
        parsed = self.date_or_none()
        date_text = parsed.strftime("%d/%m/%Y") if parsed else DATE_NOT_SET

        cost_text = ""
        cost = _as_number(self.cost)
        if cost is not None and self.is_completed:
            cost_text = f" - R${cost:.2f}"

        desc_text = f" ({self.description})" if self.description else ""
        return f"{self.service_type} on {date_text}{cost_text}{desc_text} [{self.status}]"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted shape (camelCase keys)."""
        return {
            "date": self.date,
            "serviceType": self.service_type,
            "cost": self.cost,
            "description": self.description,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaintenanceRecord":
        if not isinstance(data, dict):
            raise TypeError(f"Maintenance entry must be an object, got {type(data).__name__}")
        return cls(
            data.get("date"),
            data["serviceType"],
            data.get("cost"),
            data.get("description", ""),
            data.get("status", MaintenanceStatus.COMPLETED.value),
        )
