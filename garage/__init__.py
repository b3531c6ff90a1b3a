"""
Garage management models.

This package provides the vehicle simulator and its backend pieces:
- MaintenanceRecord: Completed or scheduled service events
- Vehicle: Cars, sports cars (turbo) and trucks (cargo), tagged by VehicleKind
- Fleet: Ordered vehicle collection persisted as one JSON blob
- Reminders: Scheduled maintenance due today or tomorrow
- VehicleRegistry: The `veiculos` document collection used by the backend
"""

from .status import MaintenanceStatus
from .outcome import Outcome
from .maintenance import MaintenanceRecord
from .vehicle import Vehicle, VehicleKind, Turbo, Cargo, HistorySummary, create_vehicle
from .loader import vehicle_to_dict, vehicle_from_dict, dump_fleet, parse_fleet
from .storage import Storage, MemoryStorage, FileStorage
from .fleet import Fleet, FLEET_STORAGE_KEY
from .reminders import Reminder, ReminderBucket, scan_upcoming, notify_upcoming

__all__ = [
    "MaintenanceStatus",
    "Outcome",
    "MaintenanceRecord",
    "Vehicle",
    "VehicleKind",
    "Turbo",
    "Cargo",
    "HistorySummary",
    "create_vehicle",
    "vehicle_to_dict",
    "vehicle_from_dict",
    "dump_fleet",
    "parse_fleet",
    "Storage",
    "MemoryStorage",
    "FileStorage",
    "Fleet",
    "FLEET_STORAGE_KEY",
    "Reminder",
    "ReminderBucket",
    "scan_upcoming",
    "notify_upcoming",
]
