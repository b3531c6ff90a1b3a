"""Reminders for scheduled maintenance due today or tomorrow."""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .vehicle import Vehicle

REMINDER_HEADER = "Scheduled maintenance reminders:"


class ReminderBucket(Enum):
    TODAY = "TODAY"
    TOMORROW = "TOMORROW"


@dataclass
class Reminder:
    """A scheduled maintenance falling on today or tomorrow."""

    bucket: ReminderBucket
    vehicle_id: str
    vehicle_model: str
    service_type: str
    date: date

    def format(self) -> str:
        return f"{self.bucket.value}: {self.service_type} for {self.vehicle_model}"


def scan_upcoming(
    vehicles: Iterable[Vehicle], today: Optional[date] = None
) -> List[Reminder]:
    """Collect scheduled records dated exactly today or tomorrow."""
    today = today or date.today()
    tomorrow = today + timedelta(days=1)

    reminders = []
    for vehicle in vehicles:
        for record in vehicle.maintenance_history:
            if not record.is_scheduled:
                continue
            record_date = record.date_or_none()
            if record_date == today:
                bucket = ReminderBucket.TODAY
            elif record_date == tomorrow:
                bucket = ReminderBucket.TOMORROW
            else:
                continue
            reminders.append(
                Reminder(bucket, vehicle.id, vehicle.model, record.service_type, record_date)
            )
    return reminders


def notify_upcoming(
    vehicles: Iterable[Vehicle],
    notify: Callable[[str], None],
    today: Optional[date] = None,
) -> List[Reminder]:
    """Send all reminders as one notification. Nothing is sent when empty."""
    reminders = scan_upcoming(vehicles, today)
    if reminders:
        lines = "\n".join(r.format() for r in reminders)
        notify(f"{REMINDER_HEADER}\n\n{lines}")
    return reminders
