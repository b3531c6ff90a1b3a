#!/usr/bin/env python3
"""Tests for the backend HTTP client."""

from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from garage.client import BackendClient
from garage.exceptions import BackendError

GENERAL = [{"id": 1, "dica": "oil"}, {"id": 2, "dica": "tyres"}]
CAR_TIPS = [{"id": 10, "dica": "rotate"}]


def _router(routes):
    """Fake session.request answering by path suffix."""

    def request(method, url, **kwargs):
        for suffix, response in routes.items():
            if url.endswith(suffix):
                return response() if callable(response) else response
        return make_response(404, {"error": "not found"}, url)

    return request


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return BackendClient("http://backend/", session=session)


class TestRequests:
    def test_base_url_and_timeout(self, client, session):
        session.request.return_value = make_response(200, [])
        client.list_vehicles()
        session.request.assert_called_once_with("GET", "http://backend/api/veiculos", timeout=20)

    def test_network_failure(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(BackendError) as exc_info:
            client.list_vehicles()
        assert exc_info.value.status is None
        assert "refused" in exc_info.value.details

    def test_error_reason_from_body(self, client, session):
        session.request.return_value = make_response(409, {"error": "A vehicle with this plate already exists."})
        with pytest.raises(BackendError) as exc_info:
            client.create_vehicle({"placa": "ABC1234"})
        assert exc_info.value.status == 409
        assert exc_info.value.details == "A vehicle with this plate already exists."

    def test_message_reason_from_body(self, client, session):
        session.request.return_value = make_response(400, {"message": "The make is required."})
        with pytest.raises(BackendError) as exc_info:
            client.update_vehicle("1", {"marca": ""})
        assert exc_info.value.details == "The make is required."

    def test_create_sends_json(self, client, session):
        session.request.return_value = make_response(201, {"_id": "1"})
        assert client.create_vehicle({"placa": "ABC1234"}) == {"_id": "1"}
        session.request.assert_called_once_with(
            "POST", "http://backend/api/veiculos", timeout=20, json={"placa": "ABC1234"}
        )

    def test_delete(self, client, session):
        session.request.return_value = make_response(200, {"message": "Vehicle deleted."})
        assert client.delete_vehicle("1") == {"message": "Vehicle deleted."}

    def test_forecast_quotes_city(self, client, session):
        session.request.return_value = make_response(200, {"list": []})
        client.get_forecast("São Paulo")
        url = session.request.call_args[0][1]
        assert url == "http://backend/api/previsao/S%C3%A3o%20Paulo"

    @pytest.mark.parametrize("status", [200, 503])
    def test_db_status(self, client, session, status):
        body = {"connectionStatus": 1, "statusMessage": "Connected"}
        session.request.return_value = make_response(status, body)
        assert client.db_status() == body

    def test_db_status_other_error(self, client, session):
        session.request.return_value = make_response(500, {"error": "boom"})
        with pytest.raises(BackendError):
            client.db_status()


class TestTips:
    def test_general(self, client, session):
        session.request.return_value = make_response(200, GENERAL)
        assert client.get_tips() == GENERAL

    def test_kind_not_found_is_empty(self, client, session):
        session.request.return_value = make_response(404, {"error": "No specific tips found for kind: moto"})
        assert client.get_tips("moto") == []

    def test_general_not_found_raises(self, client, session):
        session.request.return_value = make_response(404, {"error": "missing"})
        with pytest.raises(BackendError):
            client.get_tips()

    def test_tip_set(self, client, session):
        session.request.side_effect = _router({
            "/api/dicas-manutencao": make_response(200, GENERAL),
            "/api/dicas-manutencao/carro": make_response(200, CAR_TIPS),
        })
        assert client.get_tip_set("carro") == (GENERAL, CAR_TIPS)

    def test_tip_set_fails_as_a_whole(self, client, session):
        session.request.side_effect = _router({
            "/api/dicas-manutencao": make_response(500, {"error": "boom"}),
            "/api/dicas-manutencao/carro": make_response(200, CAR_TIPS),
        })
        with pytest.raises(BackendError):
            client.get_tip_set("carro")


class TestTipsForSelection:
    def test_nothing_selected(self, client, session, fleet):
        assert client.load_tips_for_selection(fleet) is None
        session.request.assert_not_called()

    def test_merged_for_selected(self, client, session, fleet):
        fleet.create("carro", "Fox", "white")
        fleet.select(fleet.vehicles[0].id)
        session.request.side_effect = _router({
            "/api/dicas-manutencao": make_response(200, GENERAL),
            "/api/dicas-manutencao/carro": make_response(200, CAR_TIPS),
        })
        assert client.load_tips_for_selection(fleet) == GENERAL + CAR_TIPS

    def test_stale_selection_discarded(self, client, session, fleet):
        fleet.create("carro", "Fox", "white")
        fleet.create("esportivo", "Ferrari", "red")
        fox, ferrari = fleet.vehicles
        fleet.select(fox.id)

        def general():
            # The user picks another vehicle while the request is in flight
            fleet.select(ferrari.id)
            return make_response(200, GENERAL)

        session.request.side_effect = _router({
            "/api/dicas-manutencao": general,
            "/api/dicas-manutencao/carro": make_response(200, CAR_TIPS),
        })
        assert client.load_tips_for_selection(fleet) is None
