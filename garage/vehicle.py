"""Vehicle class - one type tagged by kind, with per-kind payloads and behavior."""

import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .maintenance import MaintenanceRecord
from .outcome import Outcome

logger = logging.getLogger(__name__)


class VehicleKind(Enum):
    """Vehicle variants. Values are the persisted discriminators."""

    CAR = "carro"
    SPORTS = "esportivo"
    TRUCK = "caminhao"


DEFAULT_MAX_SPEED = {
    VehicleKind.CAR: 180,
    VehicleKind.SPORTS: 250,
    VehicleKind.TRUCK: 120,
}
TURBO_MAX_SPEED = 320
TURBO_BOOST = 1.5
MIN_CARGO_FACTOR = 0.3


@dataclass
class Turbo:
    """Sports car payload."""

    engaged: bool = False


@dataclass
class Cargo:
    """Truck payload. Capacity is fixed at creation."""

    capacity: float
    current: float = 0


@dataclass
class HistorySummary:
    """Maintenance history split for display."""

    completed: List[str] = field(default_factory=list)
    upcoming: List[str] = field(default_factory=list)
    stale: List[str] = field(default_factory=list)


def generate_vehicle_id() -> str:
    """Millisecond timestamp followed by 9 random base-36 characters."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{int(time.time() * 1000)}{suffix}"


def _positive_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number <= 0:
        return None
    return number


# Acceleration modifiers: scale the requested delta before the shared clamp.


def _plain(vehicle: "Vehicle", delta: float) -> float:
    return delta


def _turbo_boost(vehicle: "Vehicle", delta: float) -> float:
    return delta * TURBO_BOOST if vehicle.turbo.engaged else delta


def _cargo_drag(vehicle: "Vehicle", delta: float) -> float:
    cargo = vehicle.cargo
    factor = 1 - (cargo.current / (cargo.capacity * 2))
    return delta * max(MIN_CARGO_FACTOR, factor)


ACCELERATION_MODIFIERS: Dict[VehicleKind, Callable[["Vehicle", float], float]] = {
    VehicleKind.CAR: _plain,
    VehicleKind.SPORTS: _turbo_boost,
    VehicleKind.TRUCK: _cargo_drag,
}


class Vehicle:
    """
    A simulated vehicle.

    Behavior that differs per variant is selected by ``kind``: sports cars
    carry a ``Turbo`` payload, trucks a ``Cargo`` payload. State changes that
    reach a resting value (ignition, turbo, cargo, speed back to zero) call
    ``on_change`` so the owning fleet can persist itself. Plain acceleration
    does not.
    """

    def __init__(
        self,
        kind: VehicleKind,
        model: str,
        color: str,
        vehicle_id: Optional[str] = None,
        turbo: Optional[Turbo] = None,
        cargo: Optional[Cargo] = None,
        max_speed: Optional[float] = None,
    ):
        self.kind = VehicleKind(kind)
        self.id = str(vehicle_id) if vehicle_id else generate_vehicle_id()
        self.model = model
        self.color = color
        self.is_running = False
        self.speed: float = 0
        self.maintenance_history: List[MaintenanceRecord] = []
        self.on_change: Optional[Callable[[], Any]] = None

        if self.kind is VehicleKind.SPORTS:
            self.turbo = turbo or Turbo()
        else:
            self.turbo = None
        if self.kind is VehicleKind.TRUCK:
            if cargo is None:
                raise ValueError("A truck needs a cargo capacity")
            self.cargo = cargo
        else:
            self.cargo = None

        if max_speed is None:
            max_speed = DEFAULT_MAX_SPEED[self.kind]
            if self.turbo and self.turbo.engaged:
                max_speed = TURBO_MAX_SPEED
        self.max_speed = max_speed

    def __repr__(self) -> str:
        return f"Vehicle({self.kind.value!r}, {self.model!r}, {self.color!r}, id={self.id!r})"

    def _persist(self) -> None:
        if self.on_change is not None:
            self.on_change()

    # -------------------------------------------------------------------------
    # Ignition and speed
    # -------------------------------------------------------------------------

    def start(self) -> Outcome:
        if self.is_running:
            return Outcome.fail("The vehicle is already running!")
        self.is_running = True
        self._persist()
        logger.info("%s started", self.model)
        return Outcome.success(f"{self.model} started.")

    def stop(self) -> Outcome:
        if not self.is_running:
            return Outcome.fail("The vehicle is already off!")
        if self.speed > 0:
            return Outcome.fail("Stop the vehicle before turning it off!")
        self.is_running = False
        self.speed = 0
        self._persist()
        logger.info("%s turned off", self.model)
        return Outcome.success(f"{self.model} turned off.")

    def accelerate(self, delta: float) -> Outcome:
        """Increase speed by the kind-adjusted delta, capped at max_speed."""
        if not self.is_running:
            return Outcome.fail("The vehicle must be running to accelerate.")
        amount = _positive_number(delta)
        if amount is None:
            return Outcome.fail("Acceleration must be a positive number.")
        effective = ACCELERATION_MODIFIERS[self.kind](self, amount)
        self.speed = min(self.speed + effective, self.max_speed)
        logger.debug("%s speed increased to %s", self.model, self.speed)
        return Outcome.success(f"Speed: {self.speed:g} km/h")

    def brake(self, delta: float) -> Outcome:
        """Decrease speed, floored at zero. Allowed with the engine off."""
        if self.speed == 0:
            return Outcome.success(f"Speed: {self.speed:g} km/h")
        amount = _positive_number(delta)
        if amount is None:
            return Outcome.fail("Braking must be a positive number.")
        self.speed = max(0, self.speed - amount)
        logger.debug("%s speed reduced to %s", self.model, self.speed)
        if self.speed == 0:
            self._persist()
        return Outcome.success(f"Speed: {self.speed:g} km/h")

    def honk(self) -> Outcome:
        logger.info("%s: beep beep!", self.model)
        return Outcome.success("Beep beep!")

    # -------------------------------------------------------------------------
    # Sports car: turbo
    # -------------------------------------------------------------------------

    def engage_turbo(self) -> Outcome:
        if self.turbo is None:
            return Outcome.fail("This vehicle has no turbo.")
        if not self.is_running:
            return Outcome.fail("The vehicle must be running to engage the turbo.")
        if self.turbo.engaged:
            return Outcome.fail("The turbo is already engaged!")
        self.turbo.engaged = True
        self.max_speed = TURBO_MAX_SPEED
        self._persist()
        logger.info("%s turbo engaged", self.model)
        return Outcome.success("Turbo engaged!")

    def disengage_turbo(self) -> Outcome:
        if self.turbo is None:
            return Outcome.fail("This vehicle has no turbo.")
        if not self.is_running:
            return Outcome.fail("The vehicle must be running to disengage the turbo.")
        if not self.turbo.engaged:
            return Outcome.fail("The turbo is already disengaged!")
        self.turbo.engaged = False
        self.max_speed = DEFAULT_MAX_SPEED[self.kind]
        if self.speed > self.max_speed:
            # Left as is; the next brake brings it back under the cap
            logger.warning(
                "%s speed %s exceeds max speed %s after turbo disengage",
                self.model,
                self.speed,
                self.max_speed,
            )
        self._persist()
        logger.info("%s turbo disengaged", self.model)
        return Outcome.success("Turbo disengaged!")

    # -------------------------------------------------------------------------
    # Truck: cargo
    # -------------------------------------------------------------------------

    def load(self, amount: float) -> Outcome:
        if self.cargo is None:
            return Outcome.fail("This vehicle cannot carry cargo.")
        if self.is_running:
            return Outcome.fail("Turn the truck off before loading or unloading.")
        quantity = _positive_number(amount)
        if quantity is None:
            return Outcome.fail("The amount to load must be a positive number.")
        if self.cargo.current + quantity > self.cargo.capacity:
            return Outcome.fail(
                f"Cargo exceeds the truck capacity ({self.cargo.capacity:g} kg)."
            )
        self.cargo.current += quantity
        self._persist()
        logger.info("%s loaded, current cargo %s kg", self.model, self.cargo.current)
        return Outcome.success(f"Current cargo: {self.cargo.current:g} kg")

    def unload(self, amount: float) -> Outcome:
        if self.cargo is None:
            return Outcome.fail("This vehicle cannot carry cargo.")
        if self.is_running:
            return Outcome.fail("Turn the truck off before loading or unloading.")
        quantity = _positive_number(amount)
        if quantity is None:
            return Outcome.fail("The amount to unload must be a positive number.")
        if self.cargo.current - quantity < 0:
            return Outcome.fail(
                f"Not enough cargo to unload {quantity:g} kg. "
                f"Current cargo: {self.cargo.current:g} kg."
            )
        self.cargo.current -= quantity
        self._persist()
        logger.info("%s unloaded, current cargo %s kg", self.model, self.cargo.current)
        return Outcome.success(f"Current cargo: {self.cargo.current:g} kg")

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def add_maintenance(
        self, record: MaintenanceRecord, today: Optional[date] = None
    ) -> Outcome:
        """Validate and insert a record, keeping history sorted by date."""
        if not isinstance(record, MaintenanceRecord):
            logger.error("Rejected maintenance: not a MaintenanceRecord")
            return Outcome.fail("Invalid maintenance record.")
        outcome = record.validate(today)
        if not outcome:
            logger.error("Rejected maintenance for %s: %s", self.model, outcome.message)
            return outcome

        self.maintenance_history.append(record)
        self.maintenance_history.sort(key=_history_sort_key)
        logger.info("Maintenance added to %s: %s", self.model, record.service_type)
        self._persist()
        return Outcome.success(f"Maintenance '{record.service_type}' added.")

    def history_summary(self, today: Optional[date] = None) -> HistorySummary:
        """
        Split history into completed, upcoming scheduled and stale scheduled.

        A scheduled record whose date is past or unparsable is stale: it was
        probably done but never logged as completed.
        """
        today = today or date.today()
        summary = HistorySummary()
        for record in self.maintenance_history:
            if record.is_completed:
                summary.completed.append(record.format())
            elif record.is_scheduled:
                record_date = record.date_or_none()
                if record_date is not None and record_date >= today:
                    summary.upcoming.append(record.format())
                else:
                    summary.stale.append(record.format())
        return summary

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def list_label(self) -> str:
        """Short label for fleet listings, e.g. 'Carro: Fox (white)'."""
        return f"{self.kind.value.capitalize()}: {self.model} ({self.color})"

    def describe(self) -> str:
        lines = [
            f"ID: {self.id}",
            f"Model: {self.model}",
            f"Color: {self.color}",
            f"Status: {'Running' if self.is_running else 'Off'}",
            f"Speed: {self.speed:g} km/h",
            f"Max speed: {self.max_speed:g} km/h",
        ]
        if self.turbo is not None:
            lines.append(f"Turbo: {'Engaged' if self.turbo.engaged else 'Disengaged'}")
        if self.cargo is not None:
            lines.append(f"Capacity: {self.cargo.capacity:g} kg")
            lines.append(f"Current cargo: {self.cargo.current:g} kg")
        return "\n".join(lines)


def _history_sort_key(record: MaintenanceRecord):
    # Unparsable dates sort last
    parsed = record.date_or_none()
    return (parsed is None, parsed or date.min)


def create_vehicle(
    kind: str,
    model: str,
    color: str,
    cargo_capacity: Optional[float] = None,
    vehicle_id: Optional[str] = None,
) -> Vehicle:
    """
    Build a fresh vehicle for a kind tag ('carro', 'esportivo', 'caminhao').

    Raises ValueError for an unknown kind or a truck without a positive capacity.
    """
    vehicle_kind = VehicleKind(kind)
    cargo = None
    if vehicle_kind is VehicleKind.TRUCK:
        capacity = _positive_number(cargo_capacity)
        if capacity is None:
            raise ValueError(f"Invalid cargo capacity: {cargo_capacity!r}")
        cargo = Cargo(capacity=capacity)
    return Vehicle(vehicle_kind, model, color, vehicle_id=vehicle_id, cargo=cargo)
