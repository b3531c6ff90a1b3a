"""Flask backend for the garage: vehicle documents, tips and weather proxy."""

import logging
import os
from pathlib import Path

import yaml
from flask import Flask, jsonify, request, send_from_directory

from garage.exceptions import (
    DocumentValidationError,
    DuplicateKeyError,
    StoreError,
    WeatherError,
)
from garage.logging import setup_logging
from garage.registry import VehicleRegistry
from garage.tips import GENERAL_TIPS, tips_for_kind
from garage.weather import fetch_forecast

setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger("garage.web")

# Directory holding index.html and the frontend assets
STATIC_DIR = Path(os.environ.get("GARAGE_STATIC_DIR", Path(__file__).parent / "static"))

app = Flask(__name__, static_folder=str(STATIC_DIR), static_url_path="")
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")

registry = VehicleRegistry(os.environ.get("GARAGE_DB_PATH"))
registry.connect()

STORE_FAILURES = (StoreError, OSError, yaml.YAMLError)


@app.after_request
def add_cors_headers(response):
    """Allow the frontend to be served from another origin."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = (
        "Origin, X-Requested-With, Content-Type, Accept"
    )
    return response


@app.route("/")
def index():
    """Serve the frontend page."""
    if not (STATIC_DIR / "index.html").exists():
        return jsonify({"error": "Frontend not installed."}), 404
    return send_from_directory(STATIC_DIR, "index.html")


# =============================================================================
# Weather and tips
# =============================================================================


@app.route("/api/previsao/<cidade>")
def forecast(cidade: str):
    """Proxy the 5-day forecast for a city, forwarding upstream errors."""
    try:
        data = fetch_forecast(cidade, os.environ.get("API_KEY"))
    except WeatherError as e:
        return jsonify({"error": e.message}), e.status
    return jsonify(data)


@app.route("/api/dicas-manutencao")
def general_tips():
    logger.info("General maintenance tips requested")
    return jsonify(GENERAL_TIPS)


@app.route("/api/dicas-manutencao/<tipo>")
def tips_by_kind(tipo: str):
    logger.info("Maintenance tips requested for kind: %s", tipo)
    tips = tips_for_kind(tipo)
    if tips is None:
        return jsonify({"error": f"No specific tips found for kind: {tipo}"}), 404
    return jsonify(tips)


@app.route("/api/db-status")
def db_status():
    """Report the vehicle store connection state."""
    state = registry.state
    body = {"connectionStatus": state.value, "statusMessage": state.label}
    return jsonify(body), 200 if registry.is_connected else 503


# =============================================================================
# Vehicle documents
# =============================================================================


@app.route("/api/veiculos", methods=["POST"])
def create_vehicle():
    data = request.get_json(silent=True) or {}
    try:
        created = registry.create(data)
    except DuplicateKeyError:
        return jsonify({"message": "A vehicle with this plate already exists."}), 409
    except DocumentValidationError as e:
        return jsonify({"message": " ".join(e.messages)}), 400
    except STORE_FAILURES as e:
        logger.error("Error creating vehicle: %s", e)
        return jsonify({"message": "Internal error while creating vehicle."}), 500
    return jsonify(created), 201


@app.route("/api/veiculos", methods=["GET"])
def list_vehicles():
    try:
        vehicles = registry.find()
    except STORE_FAILURES as e:
        logger.error("Error listing vehicles: %s", e)
        return jsonify({"message": "Internal error while fetching vehicles."}), 500
    return jsonify(vehicles)


@app.route("/api/veiculos/<vehicle_id>", methods=["PUT"])
def update_vehicle(vehicle_id: str):
    data = request.get_json(silent=True) or {}
    try:
        updated = registry.find_by_id_and_update(vehicle_id, data)
    except DocumentValidationError as e:
        return jsonify({"message": "Invalid data", "errors": e.messages}), 400
    except STORE_FAILURES as e:
        logger.error("Error updating vehicle %s: %s", vehicle_id, e)
        return jsonify({"message": "Internal error while updating vehicle."}), 500
    if updated is None:
        return jsonify({"message": "Vehicle not found."}), 404
    return jsonify(updated), 200


@app.route("/api/veiculos/<vehicle_id>", methods=["DELETE"])
def delete_vehicle(vehicle_id: str):
    try:
        deleted = registry.find_by_id_and_delete(vehicle_id)
    except STORE_FAILURES as e:
        logger.error("Error deleting vehicle %s: %s", vehicle_id, e)
        return jsonify({"message": "Internal error while deleting vehicle."}), 500
    if deleted is None:
        return jsonify({"message": "Vehicle not found."}), 404
    return jsonify({"message": "Vehicle deleted."}), 200


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=int(os.environ.get("PORT", 3001)))
