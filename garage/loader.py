"""JSON loading and saving utilities for fleet data."""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from .maintenance import MaintenanceRecord
from .vehicle import TURBO_MAX_SPEED, Cargo, Turbo, Vehicle, VehicleKind

logger = logging.getLogger(__name__)

_REQUIRED = object()


def vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to the persisted dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": vehicle.id,
        "kind": vehicle.kind.value,
        "model": vehicle.model,
        "color": vehicle.color,
        "isRunning": vehicle.is_running,
        "speed": vehicle.speed,
        "maxSpeed": vehicle.max_speed,
    }
    if vehicle.turbo is not None:
        d["turboEngaged"] = vehicle.turbo.engaged
    if vehicle.cargo is not None:
        d["cargoCapacity"] = vehicle.cargo.capacity
        d["currentCargo"] = vehicle.cargo.current
    d["maintenanceHistory"] = [m.to_dict() for m in vehicle.maintenance_history]
    return d


def _number(data: Dict[str, Any], key: str, default: Any = _REQUIRED) -> float:
    """A numeric field; bools and numeric strings are rejected."""
    if key not in data:
        if default is _REQUIRED:
            raise KeyError(key)
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
        raise ValueError(f"Invalid {key}: {value!r}")
    return value


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"Invalid {key}: {value!r}")
    return value


def vehicle_from_dict(data: Dict[str, Any]) -> Optional[Vehicle]:
    """
    Rebuild a Vehicle of the right kind from its persisted dict.

    Returns None for an unknown kind so the caller can skip it. Structural
    problems (missing keys, wrong types) raise KeyError, TypeError or ValueError.
    """
    if not isinstance(data, dict):
        raise TypeError(f"Vehicle record must be an object, got {type(data).__name__}")

    try:
        kind = VehicleKind(data.get("kind"))
    except ValueError:
        logger.warning("Unknown vehicle kind found: %r", data.get("kind"))
        return None

    for key in ("model", "color"):
        if not isinstance(data[key], str):
            raise ValueError(f"Invalid {key}: {data[key]!r}")

    turbo = None
    cargo = None
    if kind is VehicleKind.SPORTS:
        turbo = Turbo(engaged=_flag(data, "turboEngaged"))
    elif kind is VehicleKind.TRUCK:
        capacity = _number(data, "cargoCapacity")
        if capacity <= 0:
            raise ValueError(f"Invalid cargo capacity: {capacity!r}")
        current = _number(data, "currentCargo", 0)
        if not 0 <= current <= capacity:
            raise ValueError(f"Cargo {current!r} outside 0..{capacity!r}")
        cargo = Cargo(capacity=capacity, current=current)

    vehicle = Vehicle(
        kind,
        data["model"],
        data["color"],
        vehicle_id=data["id"],
        turbo=turbo,
        cargo=cargo,
    )
    # Max speed follows from kind and turbo state; a saved value must agree
    if "maxSpeed" in data and _number(data, "maxSpeed") != vehicle.max_speed:
        raise ValueError(
            f"Max speed {data['maxSpeed']!r} does not match {kind.value} "
            f"({vehicle.max_speed})"
        )

    speed = _number(data, "speed", 0)
    # A sports car may keep its turbo speed for a while after disengaging
    ceiling = TURBO_MAX_SPEED if turbo is not None else vehicle.max_speed
    if not 0 <= speed <= ceiling:
        raise ValueError(f"Speed {speed!r} outside 0..{ceiling}")

    vehicle.is_running = _flag(data, "isRunning")
    vehicle.speed = speed
    vehicle.maintenance_history = [
        MaintenanceRecord.from_dict(m) for m in data.get("maintenanceHistory") or []
    ]
    return vehicle


def dump_fleet(vehicles: Iterable[Vehicle]) -> str:
    """Serialize vehicles to the JSON text stored in the fleet slot."""
    return json.dumps([vehicle_to_dict(v) for v in vehicles], ensure_ascii=False)


def parse_fleet(text: str) -> List[Vehicle]:
    """
    Parse the fleet slot text into vehicles, skipping unknown kinds.

    Raises ValueError (including json.JSONDecodeError), KeyError or TypeError
    when the text is not a well-formed fleet.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Fleet data must be a JSON array")
    vehicles = (vehicle_from_dict(item) for item in data)
    return [v for v in vehicles if v is not None]
