#!/usr/bin/env python3
"""Tests for the vehicle document store."""

from datetime import datetime

import pytest
import yaml

from garage.exceptions import DocumentValidationError, DuplicateKeyError, StoreNotConnectedError
from garage.registry import ConnectionState, VehicleRegistry, normalize, validate_document

VALID = {"placa": "abc1d23", "marca": "VW", "modelo": "Fox", "ano": 2015, "cor": "white"}


@pytest.fixture
def registry(tmp_path):
    registry = VehicleRegistry(tmp_path / "garage.yaml")
    assert registry.connect()
    return registry


class TestNormalize:
    def test_plate_upper_and_trimmed(self):
        assert normalize({"placa": "  abc1d23 "})["placa"] == "ABC1D23"

    def test_numeric_year_string(self):
        assert normalize({"ano": "2015"})["ano"] == 2015

    def test_non_numeric_year_kept(self):
        assert normalize({"ano": "new"})["ano"] == "new"

    def test_unknown_fields_dropped(self):
        assert normalize({"placa": "A", "_id": "x", "owner": "me"}) == {"placa": "A"}

    def test_null_color_dropped(self):
        assert "cor" not in normalize({"placa": "A", "cor": None})


class TestValidateDocument:
    def test_valid(self):
        assert validate_document(normalize(VALID)) == []

    def test_color_optional(self):
        doc = normalize({k: v for k, v in VALID.items() if k != "cor"})
        assert validate_document(doc) == []

    def test_missing_fields(self):
        messages = validate_document({"placa": "ABC1234"})
        assert "The make is required." in messages
        assert "The model is required." in messages
        assert "The year is required." in messages

    def test_empty_string_counts_as_missing(self):
        messages = validate_document({**VALID, "marca": ""})
        assert messages == ["The make is required."]

    def test_year_too_old(self):
        assert validate_document({**VALID, "ano": 1899}) == [
            "The manufacturing year must be at least 1900."
        ]

    def test_year_next_year_allowed(self):
        assert validate_document({**VALID, "ano": datetime.now().year + 1}) == []

    def test_year_in_the_future(self):
        assert validate_document({**VALID, "ano": datetime.now().year + 2}) == [
            "The manufacturing year cannot be in the future."
        ]

    def test_year_not_integer(self):
        assert validate_document({**VALID, "ano": "new"}) == ["The year must be a whole number."]


class TestConnection:
    def test_connect_creates_file(self, tmp_path):
        path = tmp_path / "data" / "garage.yaml"
        registry = VehicleRegistry(path)
        assert registry.state is ConnectionState.DISCONNECTED
        assert registry.connect()
        assert registry.is_connected
        assert yaml.safe_load(path.read_text()) == {"veiculos": []}

    def test_connect_without_path(self):
        registry = VehicleRegistry(None)
        assert not registry.connect()
        assert registry.state is ConnectionState.DISCONNECTED

    def test_connect_unreadable_file(self, tmp_path):
        path = tmp_path / "garage.yaml"
        path.write_text("veiculos: [unclosed")
        registry = VehicleRegistry(path)
        assert not registry.connect()
        assert not registry.is_connected

    @pytest.mark.parametrize("content", ["- a\n- b\n", "just text\n", "42\n", "veiculos: nope\n"])
    def test_connect_non_mapping_file(self, tmp_path, content):
        path = tmp_path / "garage.yaml"
        path.write_text(content)
        registry = VehicleRegistry(path)
        assert not registry.connect()
        assert registry.state is ConnectionState.DISCONNECTED

    def test_file_replaced_after_connect(self, registry):
        registry.path.write_text("- a\n")
        with pytest.raises(yaml.YAMLError):
            registry.find()

    def test_connect_twice(self, registry):
        assert registry.connect()

    def test_disconnect(self, registry):
        registry.disconnect()
        assert registry.state is ConnectionState.DISCONNECTED
        with pytest.raises(StoreNotConnectedError):
            registry.find()

    def test_operations_require_connection(self, tmp_path):
        registry = VehicleRegistry(tmp_path / "garage.yaml")
        with pytest.raises(StoreNotConnectedError):
            registry.create(VALID)
        with pytest.raises(StoreNotConnectedError):
            registry.find_by_id_and_delete("x")

    def test_state_labels(self):
        assert ConnectionState.CONNECTED.label == "Connected"
        assert ConnectionState.DISCONNECTING.value == 3


class TestCrud:
    def test_create(self, registry):
        doc = registry.create(VALID)
        assert doc["placa"] == "ABC1D23"
        assert len(doc["_id"]) == 24
        assert doc["createdAt"] == doc["updatedAt"]
        assert doc["createdAt"].endswith("Z")

    def test_create_persists(self, registry):
        doc = registry.create(VALID)
        reopened = VehicleRegistry(registry.path)
        reopened.connect()
        assert reopened.find() == [doc]

    def test_create_duplicate_plate(self, registry):
        registry.create(VALID)
        with pytest.raises(DuplicateKeyError):
            registry.create({**VALID, "placa": " ABC1D23"})

    def test_create_invalid(self, registry):
        with pytest.raises(DocumentValidationError) as exc_info:
            registry.create({"placa": "XYZ9999"})
        assert "The make is required." in exc_info.value.messages
        assert registry.find() == []

    def test_find_in_insertion_order(self, registry):
        registry.create(VALID)
        registry.create({**VALID, "placa": "XYZ9999"})
        assert [d["placa"] for d in registry.find()] == ["ABC1D23", "XYZ9999"]

    def test_find_by_id(self, registry):
        doc = registry.create(VALID)
        assert registry.find_by_id(doc["_id"]) == doc
        assert registry.find_by_id("missing") is None

    def test_update(self, registry):
        doc = registry.create(VALID)
        updated = registry.find_by_id_and_update(doc["_id"], {"cor": "black", "ano": "2016"})
        assert updated["cor"] == "black"
        assert updated["ano"] == 2016
        assert updated["marca"] == "VW"
        assert updated["createdAt"] == doc["createdAt"]
        assert registry.find_by_id(doc["_id"]) == updated

    def test_update_keeping_own_plate(self, registry):
        doc = registry.create(VALID)
        assert registry.find_by_id_and_update(doc["_id"], {"placa": "abc1d23"})

    def test_update_to_taken_plate(self, registry):
        registry.create(VALID)
        other = registry.create({**VALID, "placa": "XYZ9999"})
        with pytest.raises(DuplicateKeyError):
            registry.find_by_id_and_update(other["_id"], {"placa": "ABC1D23"})

    def test_update_invalid(self, registry):
        doc = registry.create(VALID)
        with pytest.raises(DocumentValidationError):
            registry.find_by_id_and_update(doc["_id"], {"ano": 1800})
        assert registry.find_by_id(doc["_id"])["ano"] == 2015

    def test_update_missing(self, registry):
        assert registry.find_by_id_and_update("missing", {"cor": "red"}) is None

    def test_delete(self, registry):
        doc = registry.create(VALID)
        assert registry.find_by_id_and_delete(doc["_id"]) == doc
        assert registry.find() == []

    def test_delete_missing(self, registry):
        assert registry.find_by_id_and_delete("missing") is None
