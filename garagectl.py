#!/usr/bin/env python3
"""
Unified CLI for the garage simulator.

Commands:
  list       - Show all vehicles in the garage
  add        - Create a car, sports car or truck
  remove     - Remove a vehicle
  show       - Show one vehicle with its maintenance summary
  drive      - Run a sequence of actions: start, accelerate, brake, turbo, load...
  log        - Record a completed maintenance
  schedule   - Schedule a future maintenance
  history    - View maintenance history split by status
  reminders  - Show maintenance scheduled for today or tomorrow
  tips       - Fetch maintenance tips for a vehicle from the backend
  forecast   - Fetch a daily weather forecast from the backend
  veiculos   - List, add, update or delete vehicle records on the backend
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from tabulate import tabulate

from garage import (
    FileStorage,
    Fleet,
    MaintenanceRecord,
    MaintenanceStatus,
    Outcome,
    Vehicle,
    VehicleKind,
    notify_upcoming,
)
from garage.client import DEFAULT_BACKEND_URL, BackendClient
from garage.exceptions import BackendError
from garage.forecast import DayForecast, summarize_forecast
from garage.logging import setup_logging

DEFAULT_DATA_DIR = Path.home() / ".garage"
DEFAULT_STEP = 10

# =============================================================================
# Formatting helpers
# =============================================================================


def format_speed(speed: Optional[float]) -> str:
    """Format a speed for display."""
    return f"{speed:,.0f} km/h" if speed is not None else "-"


def format_status(vehicle: Vehicle) -> str:
    return "Running" if vehicle.is_running else "Off"


def format_extra(vehicle: Vehicle) -> str:
    """Variant-specific state: turbo or cargo."""
    if vehicle.turbo is not None:
        return "turbo on" if vehicle.turbo.engaged else "turbo off"
    if vehicle.cargo is not None:
        return f"{vehicle.cargo.current:,.0f}/{vehicle.cargo.capacity:,.0f} kg"
    return "-"


def print_outcome(outcome: Outcome) -> int:
    """Print an outcome message and map it to an exit code."""
    if outcome.message:
        prefix = "" if outcome.ok else "Error: "
        print(f"{prefix}{outcome.message}")
    return 0 if outcome.ok else 1


def make_fleet_table(vehicles: List[Vehicle]) -> List[List[str]]:
    """Convert vehicles to table rows."""
    rows = []
    for vehicle in vehicles:
        rows.append(
            [
                vehicle.id,
                vehicle.kind.value,
                vehicle.model,
                vehicle.color,
                format_status(vehicle),
                format_speed(vehicle.speed),
                format_extra(vehicle),
            ]
        )
    return rows


def make_forecast_table(days: List[DayForecast]) -> List[List[str]]:
    """Convert daily forecasts to table rows."""
    rows = []
    for day in days:
        rows.append(
            [
                day.date.strftime("%a %d/%m"),
                day.description.capitalize(),
                f"{day.temp_min:.1f}°C",
                f"{day.temp_max:.1f}°C",
                ", ".join(day.highlights()) or "-",
            ]
        )
    return rows


# =============================================================================
# Fleet access
# =============================================================================


def open_fleet(args, remind: bool = False) -> Fleet:
    """Load the fleet from the data directory."""
    fleet = Fleet(FileStorage(args.data_dir), notify=print)
    if remind:
        fleet.on_loaded.append(lambda f: notify_upcoming(f, f.notify))
    fleet.load()
    return fleet


def find_vehicle(fleet: Fleet, ref: str) -> Optional[Vehicle]:
    """Find a vehicle by id or unique id prefix."""
    vehicle = fleet.get(ref)
    if vehicle is not None:
        return vehicle
    matches = [v for v in fleet if v.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    return None


def select_vehicle(fleet: Fleet, ref: str) -> Optional[Vehicle]:
    """Select a vehicle, printing an error when it can't be found."""
    vehicle = find_vehicle(fleet, ref)
    if vehicle is None:
        print(f"Error: No vehicle matches '{ref}'")
        return None
    return fleet.select(vehicle.id)


# =============================================================================
# Fleet commands
# =============================================================================


def cmd_list(args):
    """Show all vehicles in the garage."""
    fleet = open_fleet(args, remind=True)
    if not len(fleet):
        print("No vehicles in the garage.")
        return 0

    headers = ["ID", "Kind", "Model", "Color", "Status", "Speed", "Turbo/Cargo"]
    print(tabulate(make_fleet_table(fleet.vehicles), headers=headers, tablefmt="simple"))
    return 0


def cmd_add(args):
    """Create a vehicle."""
    fleet = open_fleet(args)
    return print_outcome(fleet.create(args.kind, args.model, args.color, args.capacity))


def cmd_remove(args):
    """Remove a vehicle."""
    fleet = open_fleet(args)
    vehicle = find_vehicle(fleet, args.vehicle)
    if vehicle is None or not fleet.remove(vehicle.id):
        print(f"Error: No vehicle matches '{args.vehicle}'")
        return 1
    print(f"Removed {vehicle.list_label()}.")
    return 0


def cmd_show(args):
    """Show one vehicle with its maintenance summary."""
    fleet = open_fleet(args)
    vehicle = select_vehicle(fleet, args.vehicle)
    if vehicle is None:
        return 1

    print(vehicle.describe())
    summary = vehicle.history_summary()
    print()
    print(f"Completed maintenance: {len(summary.completed)}")
    print(f"Upcoming appointments: {len(summary.upcoming)}")
    if summary.stale:
        print(f"Past appointments (not completed?): {len(summary.stale)}")
    return 0


def _step(amount: Optional[float]) -> float:
    return DEFAULT_STEP if amount is None else amount


ACTIONS = {
    "start": lambda v, amount: v.start(),
    "stop": lambda v, amount: v.stop(),
    "accelerate": lambda v, amount: v.accelerate(_step(amount)),
    "brake": lambda v, amount: v.brake(_step(amount)),
    "honk": lambda v, amount: v.honk(),
    "turbo-on": lambda v, amount: v.engage_turbo(),
    "turbo-off": lambda v, amount: v.disengage_turbo(),
    "load": lambda v, amount: v.load(amount),
    "unload": lambda v, amount: v.unload(amount),
}


def parse_steps(tokens: List[str]) -> List[Tuple[str, Optional[float]]]:
    """
    Split 'start accelerate 10 brake' into (action, amount) pairs.

    An action may be followed by a number; otherwise its amount is None.
    Raises ValueError for an unknown action or a number with no action.
    """
    steps: List[Tuple[str, Optional[float]]] = []
    for token in tokens:
        if token in ACTIONS:
            steps.append((token, None))
            continue
        try:
            amount = float(token)
        except ValueError:
            raise ValueError(f"Unknown action '{token}'") from None
        if not steps or steps[-1][1] is not None:
            raise ValueError(f"Amount {token} does not follow an action")
        steps[-1] = (steps[-1][0], amount)
    return steps


def cmd_drive(args):
    """Apply a sequence of actions to a vehicle, stopping at the first failure."""
    fleet = open_fleet(args)
    vehicle = select_vehicle(fleet, args.vehicle)
    if vehicle is None:
        return 1

    try:
        steps = parse_steps(args.steps)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    code = 0
    for action, amount in steps:
        if action in ("load", "unload") and amount is None:
            print(f"Error: '{action}' needs an amount in kg")
            code = 1
            break
        code = print_outcome(ACTIONS[action](vehicle, amount))
        if code:
            break

    print(f"{vehicle.model}: {format_status(vehicle)}, {format_speed(vehicle.speed)}")
    return code


# =============================================================================
# Maintenance commands
# =============================================================================


def cmd_log(args):
    """Record a completed maintenance."""
    fleet = open_fleet(args)
    vehicle = select_vehicle(fleet, args.vehicle)
    if vehicle is None:
        return 1

    if args.cost is None or args.cost < 0:
        print("Error: A completed maintenance needs a cost of zero or more.")
        return 1

    record = MaintenanceRecord(
        args.date or date.today().isoformat(),
        args.service_type.strip(),
        args.cost,
        (args.description or "").strip(),
        MaintenanceStatus.COMPLETED.value,
    )
    outcome = vehicle.add_maintenance(record)
    if outcome:
        print(f"Logged: {record.format()}")
        return 0
    return print_outcome(outcome)


def cmd_schedule(args):
    """Schedule a maintenance."""
    fleet = open_fleet(args)
    vehicle = select_vehicle(fleet, args.vehicle)
    if vehicle is None:
        return 1

    record = MaintenanceRecord(
        args.date,
        args.service_type.strip(),
        args.cost,
        (args.description or "").strip(),
        MaintenanceStatus.SCHEDULED.value,
    )
    outcome = vehicle.add_maintenance(record)
    if not outcome:
        return print_outcome(outcome)
    print(f"Scheduled: {record.format()}")
    notify_upcoming(fleet, print)
    return 0


def cmd_history(args):
    """View maintenance history split by status."""
    fleet = open_fleet(args)
    vehicle = select_vehicle(fleet, args.vehicle)
    if vehicle is None:
        return 1

    summary = vehicle.history_summary()
    print(f"Vehicle: {vehicle.list_label()}")
    print()

    print("COMPLETED:")
    for line in summary.completed or ["No completed maintenance recorded."]:
        print(f"  {line}")
    print()

    print("UPCOMING:")
    for line in summary.upcoming or ["No upcoming appointments."]:
        print(f"  {line}")

    if summary.stale:
        print()
        print("PAST APPOINTMENTS (NOT COMPLETED?):")
        for line in summary.stale:
            print(f"  {line}")
    return 0


def cmd_reminders(args):
    """Show maintenance scheduled for today or tomorrow."""
    fleet = open_fleet(args)
    if not notify_upcoming(fleet, print):
        print("No maintenance scheduled for today or tomorrow.")
    return 0


# =============================================================================
# Backend commands
# =============================================================================


def cmd_tips(args):
    """Fetch maintenance tips for a vehicle."""
    fleet = open_fleet(args)
    vehicle = select_vehicle(fleet, args.vehicle)
    if vehicle is None:
        return 1

    client = BackendClient(args.backend)
    try:
        tips = client.load_tips_for_selection(fleet)
    except BackendError as e:
        print(f"Error: Could not load tips from the server ({e.message})")
        return 1

    if not tips:
        print("No quick maintenance tips available for this vehicle.")
        return 0
    for tip in tips:
        print(f"- {tip['dica']}")
    return 0


def cmd_forecast(args):
    """Fetch a daily weather forecast."""
    client = BackendClient(args.backend)
    try:
        data = client.get_forecast(args.city)
    except BackendError as e:
        reason = f": {e.details}" if e.details else ""
        print(f"Error: Failed to fetch forecast{reason}")
        return 1

    days = summarize_forecast(data)
    city = (data.get("city") or {}).get("name") or args.city
    print(f"Forecast for {city}")
    print()
    if not days:
        print("No forecast data to show.")
        return 0

    if args.days:
        days = days[: args.days]
    headers = ["Day", "Conditions", "Min", "Max", "Highlights"]
    print(tabulate(make_forecast_table(days), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Vehicle record commands (backend `veiculos` collection)
# =============================================================================

RECORD_FIELDS = ("placa", "marca", "modelo", "ano", "cor")


def make_record_table(docs: List[dict]) -> List[List[str]]:
    """Convert backend vehicle records to table rows."""
    rows = []
    for doc in docs:
        rows.append(
            [
                doc.get("_id", "-"),
                doc.get("placa", "-"),
                doc.get("marca", "-"),
                doc.get("modelo", "-"),
                doc.get("ano", "-"),
                doc.get("cor") or "-",
            ]
        )
    return rows


def print_backend_error(e: BackendError) -> int:
    print(f"Error: {e.details or e.message}")
    return 1


def records_list(client: BackendClient, args) -> int:
    docs = client.list_vehicles()
    if not docs:
        print("No vehicle records on the server.")
        return 0
    headers = ["ID", "Plate", "Make", "Model", "Year", "Color"]
    print(tabulate(make_record_table(docs), headers=headers, tablefmt="simple"))
    return 0


def records_add(client: BackendClient, args) -> int:
    data = {"placa": args.placa, "marca": args.marca, "modelo": args.modelo, "ano": args.ano}
    if args.cor:
        data["cor"] = args.cor
    doc = client.create_vehicle(data)
    print(f"Vehicle record {doc['placa']} created ({doc['_id']}).")
    return 0


def records_update(client: BackendClient, args) -> int:
    data = {f: getattr(args, f) for f in RECORD_FIELDS if getattr(args, f) is not None}
    if not data:
        print("Error: Nothing to update. Pass at least one field option.")
        return 1
    doc = client.update_vehicle(args.id, data)
    print(f"Vehicle record {doc['placa']} updated.")
    return 0


def records_delete(client: BackendClient, args) -> int:
    print(client.delete_vehicle(args.id).get("message", "Vehicle deleted."))
    return 0


def records_status(client: BackendClient, args) -> int:
    status = client.db_status()
    print(f"Database: {status.get('statusMessage')} ({status.get('connectionStatus')})")
    return 0 if status.get("connectionStatus") == 1 else 1


RECORD_COMMANDS = {
    "list": records_list,
    "add": records_add,
    "update": records_update,
    "delete": records_delete,
    "status": records_status,
}


def cmd_veiculos(args):
    """Manage vehicle records stored by the backend."""
    client = BackendClient(args.backend)
    try:
        return RECORD_COMMANDS[args.records_command](client, args)
    except BackendError as e:
        return print_backend_error(e)


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Garage simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s add carro Fox white
  %(prog)s add caminhao Actros blue --capacity 1000
  %(prog)s list
  %(prog)s drive 1718 start
  %(prog)s drive 1718 accelerate 20 accelerate 20 brake 40
  %(prog)s log 1718 "Oil change" --date 2026-01-10 --cost 150
  %(prog)s schedule 1718 "Brake check" --date 2026-12-01
  %(prog)s forecast "Sao Paulo" --days 3
  %(prog)s veiculos add abc1d23 VW Fox 2015 --cor white
""",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory holding the saved garage (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--backend",
        default=DEFAULT_BACKEND_URL,
        help=f"Backend base URL (default: {DEFAULT_BACKEND_URL})",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Show all vehicles in the garage")

    add_parser = subparsers.add_parser("add", help="Create a vehicle")
    add_parser.add_argument(
        "kind", choices=[k.value for k in VehicleKind], help="Vehicle kind"
    )
    add_parser.add_argument("model", type=str, help="Model name")
    add_parser.add_argument("color", type=str, help="Color")
    add_parser.add_argument(
        "--capacity", type=int, help="Cargo capacity in kg (trucks only)"
    )

    remove_parser = subparsers.add_parser("remove", help="Remove a vehicle")
    remove_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")

    show_parser = subparsers.add_parser("show", help="Show one vehicle")
    show_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")

    drive_parser = subparsers.add_parser(
        "drive", help="Apply one or more actions to a vehicle"
    )
    drive_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")
    drive_parser.add_argument(
        "steps",
        nargs="+",
        metavar="STEP",
        help=(
            f"An action, optionally followed by an amount. Actions: "
            f"{', '.join(ACTIONS)}. accelerate/brake take km/h "
            f"(default {DEFAULT_STEP}), load/unload take kg"
        ),
    )

    log_parser = subparsers.add_parser("log", help="Record a completed maintenance")
    log_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")
    log_parser.add_argument("service_type", type=str, help="Service performed")
    log_parser.add_argument(
        "--date", type=str, help="Service date in YYYY-MM-DD format (default: today)"
    )
    log_parser.add_argument("--cost", type=float, help="Cost of service")
    log_parser.add_argument("--description", type=str, help="Notes about the service")

    schedule_parser = subparsers.add_parser("schedule", help="Schedule a maintenance")
    schedule_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")
    schedule_parser.add_argument("service_type", type=str, help="Service to perform")
    schedule_parser.add_argument(
        "--date", type=str, required=True, help="Appointment date (YYYY-MM-DD)"
    )
    schedule_parser.add_argument("--cost", type=float, help="Estimated cost")
    schedule_parser.add_argument("--description", type=str, help="Notes")

    history_parser = subparsers.add_parser("history", help="View maintenance history")
    history_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")

    subparsers.add_parser(
        "reminders", help="Show maintenance scheduled for today or tomorrow"
    )

    tips_parser = subparsers.add_parser("tips", help="Fetch maintenance tips")
    tips_parser.add_argument("vehicle", help="Vehicle id (or unique prefix)")

    forecast_parser = subparsers.add_parser("forecast", help="Fetch a weather forecast")
    forecast_parser.add_argument("city", type=str, help="City name")
    forecast_parser.add_argument(
        "--days", type=int, help="Only show the first N days"
    )

    veiculos_parser = subparsers.add_parser(
        "veiculos", help="Manage vehicle records on the backend"
    )
    records = veiculos_parser.add_subparsers(dest="records_command", required=True)
    records.add_parser("list", help="List vehicle records")

    record_add = records.add_parser("add", help="Create a vehicle record")
    record_add.add_argument("placa", help="Licence plate")
    record_add.add_argument("marca", help="Make")
    record_add.add_argument("modelo", help="Model")
    record_add.add_argument("ano", type=int, help="Manufacturing year")
    record_add.add_argument("--cor", help="Color")

    record_update = records.add_parser("update", help="Update a vehicle record")
    record_update.add_argument("id", help="Record id")
    record_update.add_argument("--placa", help="Licence plate")
    record_update.add_argument("--marca", help="Make")
    record_update.add_argument("--modelo", help="Model")
    record_update.add_argument("--ano", type=int, help="Manufacturing year")
    record_update.add_argument("--cor", help="Color")

    record_delete = records.add_parser("delete", help="Delete a vehicle record")
    record_delete.add_argument("id", help="Record id")

    records.add_parser("status", help="Show the backend database status")

    return parser


COMMANDS = {
    "list": cmd_list,
    "add": cmd_add,
    "remove": cmd_remove,
    "show": cmd_show,
    "drive": cmd_drive,
    "log": cmd_log,
    "schedule": cmd_schedule,
    "history": cmd_history,
    "reminders": cmd_reminders,
    "tips": cmd_tips,
    "forecast": cmd_forecast,
    "veiculos": cmd_veiculos,
}


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)
