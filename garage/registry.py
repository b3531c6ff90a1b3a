"""
The `veiculos` document collection behind the backend CRUD routes.

Documents live in a YAML file and are checked against ``schema.yaml`` with
jsonschema before every write.
"""

import copy
import logging
import re
import secrets
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from jsonschema import Draft7Validator

from .exceptions import DocumentValidationError, DuplicateKeyError, StoreNotConnectedError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"
COLLECTION = "veiculos"
FIELDS = ("placa", "marca", "modelo", "ano", "cor")
UNIQUE_FIELD = "placa"


class ConnectionState(Enum):
    """Store connection states, numbered like a database driver's ready state."""

    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


def load_schema() -> dict:
    """Load the document schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _new_id() -> str:
    return secrets.token_hex(12)


def normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known fields only, trim and upper-case the plate, cast a numeric year."""
    doc = {k: data[k] for k in FIELDS if k in data}
    placa = doc.get("placa")
    if isinstance(placa, str):
        doc["placa"] = placa.strip().upper()
    ano = doc.get("ano")
    if isinstance(ano, str) and re.fullmatch(r"\s*-?\d+\s*", ano):
        doc["ano"] = int(ano)
    if doc.get("cor") is None:
        doc.pop("cor", None)
    return doc


def _error_field(error) -> Optional[str]:
    if error.validator == "required":
        match = re.match(r"'([^']+)'", error.message)
        return match.group(1) if match else None
    return error.path[0] if error.path else None


def validate_document(doc: Dict[str, Any], schema: Optional[dict] = None) -> List[str]:
    """Validate a normalized document. Returns the list of error messages."""
    schema = copy.deepcopy(schema or load_schema())
    schema["properties"]["ano"]["maximum"] = datetime.now().year + 1
    validator = Draft7Validator(schema)

    messages = []
    for error in sorted(validator.iter_errors(doc), key=lambda e: list(e.path)):
        field = _error_field(error)
        custom = schema["properties"].get(field, {}).get("x-messages", {}) if field else {}
        # An empty string counts as missing
        key = "required" if error.validator == "minLength" else error.validator
        if field:
            messages.append(custom.get(key) or f"{field}: {error.message}")
        else:
            messages.append(error.message)
    return messages


class VehicleRegistry:
    """
    CRUD over the vehicle documents stored in one YAML file.

    ``connect()`` must succeed before any operation; until then operations
    raise StoreNotConnectedError.
    """

    def __init__(self, path: Union[str, Path, None]):
        self.path = Path(path) if path else None
        self.state = ConnectionState.DISCONNECTED
        self.schema = load_schema()
        self._lock = threading.Lock()

    def connect(self) -> bool:
        """Open the store file, creating it if needed. Failures are logged."""
        if self.state is ConnectionState.CONNECTED:
            logger.info("Store already connected")
            return True
        if self.path is None:
            logger.error("GARAGE_DB_PATH is not set; the vehicle store cannot connect.")
            return False

        self.state = ConnectionState.CONNECTING
        try:
            if self.path.exists():
                self._read()
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._write({COLLECTION: []})
        except (OSError, yaml.YAMLError) as e:
            self.state = ConnectionState.DISCONNECTED
            logger.error("Failed to connect to vehicle store %s: %s", self.path, e)
            return False

        self.state = ConnectionState.CONNECTED
        logger.info("Connected to vehicle store %s", self.path)
        return True

    def disconnect(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            return
        self.state = ConnectionState.DISCONNECTED
        logger.warning("Vehicle store disconnected")

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def _require_connected(self) -> None:
        if not self.is_connected:
            raise StoreNotConnectedError()

    def _read(self) -> Dict[str, Any]:
        with open(self.path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        if not isinstance(data, dict):
            raise yaml.YAMLError(f"{self.path} does not hold a mapping")
        if data.get(COLLECTION) is None:
            data[COLLECTION] = []
        if not isinstance(data[COLLECTION], list):
            raise yaml.YAMLError(f"{self.path}: '{COLLECTION}' is not a list")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        with open(self.path, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )

    def _check(self, doc: Dict[str, Any], docs: List[Dict], exclude_id: Optional[str] = None) -> None:
        messages = validate_document(doc, self.schema)
        if messages:
            raise DocumentValidationError(messages)
        for other in docs:
            if other["_id"] != exclude_id and other.get(UNIQUE_FIELD) == doc[UNIQUE_FIELD]:
                raise DuplicateKeyError(UNIQUE_FIELD, doc[UNIQUE_FIELD])

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new document and return it with _id and timestamps."""
        self._require_connected()
        doc = normalize(data or {})
        with self._lock:
            store = self._read()
            self._check(doc, store[COLLECTION])
            now = _now()
            created = {"_id": _new_id(), **doc, "createdAt": now, "updatedAt": now}
            store[COLLECTION].append(created)
            self._write(store)
        logger.info("Vehicle created: %s", created["placa"])
        return created

    def find(self) -> List[Dict[str, Any]]:
        """All documents in insertion order."""
        self._require_connected()
        with self._lock:
            return self._read()[COLLECTION]

    def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        for doc in self.find():
            if doc["_id"] == doc_id:
                return doc
        return None

    def find_by_id_and_update(self, doc_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply the given fields, validate and return the updated document."""
        self._require_connected()
        with self._lock:
            store = self._read()
            docs = store[COLLECTION]
            index = next((i for i, d in enumerate(docs) if d["_id"] == doc_id), None)
            if index is None:
                return None

            current = docs[index]
            merged = normalize({**{k: current[k] for k in FIELDS if k in current}, **(data or {})})
            self._check(merged, docs, exclude_id=doc_id)
            updated = {
                "_id": doc_id,
                **merged,
                "createdAt": current.get("createdAt"),
                "updatedAt": _now(),
            }
            docs[index] = updated
            self._write(store)
        logger.info("Vehicle updated: %s", doc_id)
        return updated

    def find_by_id_and_delete(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Remove a document, returning it (or None if it didn't exist)."""
        self._require_connected()
        with self._lock:
            store = self._read()
            docs = store[COLLECTION]
            index = next((i for i, d in enumerate(docs) if d["_id"] == doc_id), None)
            if index is None:
                return None
            deleted = docs.pop(index)
            self._write(store)
        logger.info("Vehicle deleted: %s", doc_id)
        return deleted
