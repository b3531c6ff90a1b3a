"""Fleet class - the ordered vehicle collection and its persisted mirror."""

import logging
from typing import Callable, Iterator, List, Optional

from .loader import dump_fleet, parse_fleet
from .outcome import Outcome
from .storage import Storage
from .vehicle import Vehicle, VehicleKind, create_vehicle

logger = logging.getLogger(__name__)

FLEET_STORAGE_KEY = "minhaGaragemInteligente"


def _ignore(message: str) -> None:
    pass


class Fleet:
    """
    All vehicles of the garage plus the current selection.

    The whole fleet is written to ``storage`` as one JSON blob whenever a
    vehicle reports a state change. ``notify`` receives operator-facing
    messages for failures that are not tied to a single action (save and
    load problems, reminders). ``on_loaded`` listeners run after a
    successful load.
    """

    def __init__(
        self,
        storage: Storage,
        notify: Optional[Callable[[str], None]] = None,
        storage_key: str = FLEET_STORAGE_KEY,
    ):
        self.storage = storage
        self.storage_key = storage_key
        self.notify = notify or _ignore
        self.vehicles: List[Vehicle] = []
        self.selected_id: Optional[str] = None
        self.selection_generation = 0
        self.on_loaded: List[Callable[["Fleet"], None]] = []

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(self.vehicles)

    def __len__(self) -> int:
        return len(self.vehicles)

    def get(self, vehicle_id: str) -> Optional[Vehicle]:
        """Find a vehicle by id."""
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def _attach(self, vehicle: Vehicle) -> None:
        vehicle.on_change = self.save
        self.vehicles.append(vehicle)

    def add(self, vehicle: Vehicle) -> None:
        """Append a vehicle and persist. Raises ValueError on a duplicate id."""
        if self.get(vehicle.id) is not None:
            raise ValueError(f"Vehicle id already in fleet: {vehicle.id}")
        self._attach(vehicle)
        self.save()

    def create(
        self,
        kind: str,
        model: str,
        color: str,
        cargo_capacity: Optional[object] = None,
    ) -> Outcome:
        """Validate creation input, build the vehicle and add it."""
        model = (model or "").strip()
        color = (color or "").strip()
        try:
            vehicle_kind = VehicleKind(kind)
        except ValueError:
            logger.error("Unknown vehicle kind for creation: %r", kind)
            return Outcome.fail(f"Invalid vehicle kind: {kind!r}.")

        if not model or not color:
            return Outcome.fail("Model and color are required.")

        capacity = None
        if vehicle_kind is VehicleKind.TRUCK:
            try:
                capacity = int(cargo_capacity)
            except (TypeError, ValueError):
                capacity = None
            if capacity is None or capacity <= 0:
                return Outcome.fail("Invalid cargo capacity for truck.")

        vehicle = create_vehicle(vehicle_kind, model, color, cargo_capacity=capacity)
        self.add(vehicle)
        logger.info("Created %s %s (%s)", vehicle.kind.value, model, vehicle.id)
        return Outcome.success(f"{vehicle.kind.value.capitalize()} {model} created.")

    def remove(self, vehicle_id: str) -> bool:
        """Remove a vehicle by id. Returns False if it wasn't in the fleet."""
        vehicle = self.get(vehicle_id)
        if vehicle is None:
            return False
        self.vehicles.remove(vehicle)
        vehicle.on_change = None
        if self.selected_id == vehicle_id:
            self.select(None)
        self.save()
        return True

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def selected(self) -> Optional[Vehicle]:
        if self.selected_id is None:
            return None
        return self.get(self.selected_id)

    def select(self, vehicle_id: Optional[str]) -> Optional[Vehicle]:
        """
        Select a vehicle (or clear the selection with None).

        Every call starts a new selection generation, so results issued for
        an earlier selection can be recognized as stale.
        """
        vehicle = self.get(vehicle_id) if vehicle_id is not None else None
        self.selected_id = vehicle.id if vehicle else None
        self.selection_generation += 1
        return vehicle

    def selection_token(self) -> int:
        return self.selection_generation

    def is_current(self, token: int) -> bool:
        return token == self.selection_generation

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self) -> bool:
        """Write the whole fleet to storage. Failures are reported, not raised."""
        try:
            self.storage.set(self.storage_key, dump_fleet(self.vehicles))
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving fleet: %s", e)
            self.notify("Could not save the garage state.")
            return False
        logger.debug("Fleet saved (%d vehicles)", len(self.vehicles))
        return True

    def load(self) -> bool:
        """
        Replace the in-memory fleet with the persisted one.

        Returns True when a fleet was read. A missing slot leaves an empty
        fleet. A corrupt slot is reported, deleted and leaves an empty fleet.
        """
        for vehicle in self.vehicles:
            vehicle.on_change = None
        self.vehicles = []
        # Invalidates results issued for the previous selection
        self.select(None)

        try:
            text = self.storage.get(self.storage_key)
        except OSError as e:
            logger.error("Error reading saved fleet: %s", e)
            self.notify("Could not read the saved garage data.")
            return False

        if text is None:
            logger.info("No saved fleet found")
            return False

        try:
            vehicles = parse_fleet(text)
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Error loading saved fleet: %s", e)
            self.notify("Error loading saved garage data. The data may be corrupted.")
            try:
                self.storage.remove(self.storage_key)
            except OSError as remove_error:
                logger.error("Error removing corrupt fleet: %s", remove_error)
            return False

        for vehicle in vehicles:
            if self.get(vehicle.id) is not None:
                logger.warning("Duplicate vehicle id skipped: %s", vehicle.id)
                continue
            self._attach(vehicle)
        logger.info("Fleet loaded (%d vehicles)", len(self.vehicles))

        for listener in self.on_loaded:
            listener(self)
        return True
