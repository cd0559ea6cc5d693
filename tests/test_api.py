"""
Tests for api.py

The requests.Session is a MagicMock; these check request shapes,
id mapping and conversion of failures into TransportError.
"""
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from api import ApiSession, ResourceClient
from errors import TransportError
from models import Product, UtilityExpense


def _response(status=200, body=b"", json_value=None):
    resp = MagicMock()
    resp.status_code = status
    resp.content = body
    if json_value is not None:
        resp.json.return_value = json_value
    else:
        resp.json.side_effect = ValueError("no json")
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(http):
    return ApiSession("http://station.local/api/", timeout=5, session=http)


class TestApiSession:
    def test_url_joins_parts(self, api):
        assert api.url("/products", "p1") == "http://station.local/api/products/p1"

    def test_configure_replaces_base_url(self, api):
        api.configure("http://other:8080/api", 3)
        assert api.url("sales") == "http://other:8080/api/sales"
        assert api.timeout == 3.0

    def test_connection_error(self, api, http):
        http.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransportError) as ei:
            api.request("GET", "/sales")
        assert ei.value.status is None

    def test_timeout(self, api, http):
        http.request.side_effect = requests.Timeout("slow")
        with pytest.raises(TransportError):
            api.request("GET", "/sales")

    def test_http_error_status(self, api, http):
        http.request.return_value = _response(404, b"{}", {})
        with pytest.raises(TransportError) as ei:
            api.request("DELETE", "/sales", "x")
        assert ei.value.status == 404

    def test_bad_json(self, api, http):
        http.request.return_value = _response(200, b"<html>")
        with pytest.raises(TransportError):
            api.request("GET", "/sales")

    def test_empty_body(self, api, http):
        http.request.return_value = _response(204, b"")
        assert api.request("DELETE", "/sales", "x") is None


class TestResourceClient:
    def test_list_maps_underscore_id(self, api, http):
        http.request.return_value = _response(200, b"[...]", [
            {"_id": "p1", "name": "Diesel", "category": "Fuel", "quantity": "100",
             "pricePerUnit": 1.5, "lastRestockDate": "2024-01-02T00:00:00.000Z"},
        ])
        rows = ResourceClient(api, "/products", Product).list()
        assert rows == [Product(name="Diesel", category="Fuel", quantity=100, pricePerUnit=1.5,
                                lastRestockDate=date(2024, 1, 2), id="p1")]
        http.request.assert_called_once_with(
            "GET", "http://station.local/api/products", json=None, timeout=5.0)

    def test_list_accepts_data_envelope(self, api, http):
        http.request.return_value = _response(200, b"{...}", {"data": [{"id": 7, "type": "Gas", "amount": 3}]})
        rows = ResourceClient(api, "/utility-expenses", UtilityExpense).list()
        assert rows[0].id == "7"
        assert rows[0].amount == 3.0

    def test_list_rejects_other_shapes(self, api, http):
        http.request.return_value = _response(200, b"{...}", {"message": "ok"})
        with pytest.raises(TransportError):
            ResourceClient(api, "/products", Product).list()

    def test_create_posts_payload_without_id(self, api, http):
        http.request.return_value = _response(201, b"{...}", {"_id": "u9", "type": "Water", "amount": 30,
                                                              "date": "2024-01-01"})
        rec = UtilityExpense(type="Water", amount=30.0, date=date(2024, 1, 1), description="bill")
        saved = ResourceClient(api, "/utility-expenses", UtilityExpense).create(rec)
        assert saved.id == "u9"
        http.request.assert_called_once_with(
            "POST", "http://station.local/api/utility-expenses",
            json={"type": "Water", "amount": 30.0, "date": "2024-01-01", "description": "bill"},
            timeout=5.0,
        )

    def test_update_without_body_keeps_sent_record(self, api, http):
        http.request.return_value = _response(200, b"")
        rec = UtilityExpense(type="Gas", amount=1.0, date=date(2024, 1, 1))
        saved = ResourceClient(api, "/utility-expenses", UtilityExpense).update("u1", rec)
        assert saved.id == "u1"
        assert http.request.call_args[0][:2] == ("PUT", "http://station.local/api/utility-expenses/u1")

    def test_delete(self, api, http):
        http.request.return_value = _response(200, b"")
        ResourceClient(api, "/products", Product).delete("p1")
        assert http.request.call_args[0] == ("DELETE", "http://station.local/api/products/p1")

    def test_empty_id_rejected(self, api):
        with pytest.raises(ValueError):
            ResourceClient(api, "/products", Product).delete("")

    def test_bad_record_becomes_transport_error(self, api, http):
        http.request.return_value = _response(200, b"[...]", [{"_id": "p1", "lastRestockDate": "someday"}])
        with pytest.raises(TransportError):
            ResourceClient(api, "/products", Product).list()

    def test_bad_saved_record_becomes_transport_error(self, api, http):
        http.request.return_value = _response(201, b"{...}", {"_id": "1", "type": "Gas", "amount": 1,
                                                              "date": "not-a-date"})
        rec = UtilityExpense(type="Gas", amount=1.0, date=date(2024, 1, 1))
        client = ResourceClient(api, "/utility-expenses", UtilityExpense)
        with pytest.raises(TransportError):
            client.create(rec)
        with pytest.raises(TransportError):
            client.update("1", rec)


class TestApiSessionLifecycle:
    def test_context_manager_closes_session(self, http):
        with ApiSession("http://station.local/api", session=http) as api:
            assert api.session is http
        http.close.assert_called_once_with()
        assert api._session is None
