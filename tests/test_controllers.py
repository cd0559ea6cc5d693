"""
Tests for controllers.py

ListController search/sort and the EditSession state machine, driven
through an in-memory client (see conftest.FakeClient).
"""
import pytest

from controllers import EditSession, ListController, SessionState, connect
from errors import TransportError, ValidationError
from models import Employee
from resources import EMPLOYEES, PRODUCTS, SALES, USERS

from conftest import FakeClient


@pytest.fixture
def emp_list(employee_client):
    ctl = ListController(employee_client, EMPLOYEES)
    ctl.refresh()
    return ctl


@pytest.fixture
def sale_list(sales, products):
    ctl = ListController(FakeClient(sales), SALES, reference_clients={"products": FakeClient(products)})
    ctl.refresh()
    return ctl


def _names(records):
    return [r.name for r in records]


def _employee_form(**over):
    values = {"name": "Dan Gray", "email": "d@example.com", "phone": "0774", "nicNumber": "N4", "address": ""}
    values.update(over)
    return values


# ── ListController ───────────────────────────────────────────────────────────

class TestListController:
    def test_refresh_keeps_fetch_order(self, emp_list):
        assert _names(emp_list.visible) == ["Charlie Brown", "alice Smith", "Bob Stone"]

    def test_search_is_case_insensitive_substring(self, emp_list, employee_client):
        calls = len(employee_client.calls)
        emp_list.set_query("ST")
        assert _names(emp_list.visible) == ["Bob Stone"]
        emp_list.set_query("ALICE")
        assert _names(emp_list.visible) == ["alice Smith"]
        # filtering never goes to the network
        assert len(employee_client.calls) == calls

    def test_empty_query_shows_all(self, emp_list):
        emp_list.set_query("zzz")
        assert emp_list.visible == []
        emp_list.set_query("")
        assert len(emp_list.visible) == 3

    def test_sort_by_name_and_refresh_clears_it(self, emp_list):
        emp_list.sort_by("name")
        assert _names(emp_list.visible) == ["alice Smith", "Bob Stone", "Charlie Brown"]
        emp_list.sort_by("name", descending=True)
        assert _names(emp_list.visible)[0] == "Charlie Brown"
        emp_list.refresh()
        assert emp_list.sort is None
        assert _names(emp_list.visible) == ["Charlie Brown", "alice Smith", "Bob Stone"]

    def test_clear_sort_restores_fetch_order(self, emp_list):
        emp_list.sort_by("name")
        emp_list.clear_sort()
        assert emp_list.sort is None
        assert _names(emp_list.visible) == ["Charlie Brown", "alice Smith", "Bob Stone"]

    def test_sort_on_other_column_rejected(self, emp_list):
        with pytest.raises(ValueError):
            emp_list.sort_by("email")

    def test_failed_refresh_keeps_previous_list(self, emp_list, employee_client):
        employee_client.fail_on.add("list")
        with pytest.raises(TransportError):
            emp_list.refresh()
        assert len(emp_list.all) == 3

    def test_sales_search_by_product_name(self, sale_list):
        sale_list.set_query("oil")
        assert [s.id for s in sale_list.visible] == ["s2"]

    def test_set_references_updates_lookups(self, sale_list, products):
        sale_list.set_query("gas")
        assert sale_list.visible == []
        products[0].name = "Gasoline"
        sale_list.set_references("products", products)
        assert [s.id for s in sale_list.visible] == ["s1"]
        assert SALES.row(sale_list.get("s1"), sale_list.refs)[0] == "Gasoline"

    def test_unresolved_product(self, sale_list):
        sale_list.set_query("unknown")
        assert sale_list.visible == []
        gone = sale_list.get("s3")
        assert SALES.row(gone, sale_list.refs)[0] == "Unknown"

    def test_total_over_visible(self, expenses):
        from resources import UTILITY_EXPENSES
        ctl = ListController(FakeClient(expenses), UTILITY_EXPENSES)
        ctl.refresh()
        assert ctl.total("amount") == 60.0
        ctl.set_query("water")
        assert ctl.total("amount") == 30.0


# ── EditSession ──────────────────────────────────────────────────────────────

class TestEditSession:
    def test_create_flow(self, emp_list, employee_client):
        s = EditSession(emp_list)
        s.open_create()
        assert s.state is SessionState.CREATING
        for k, v in _employee_form().items():
            s.set_value(k, v)
        outcome = s.submit()
        assert outcome.saved.id == "new1"
        assert s.state is SessionState.IDLE
        assert "Dan Gray" in _names(emp_list.all)
        assert employee_client.ops()[-2:] == ["create", "list"]

    def test_edit_prefills_and_updates(self, emp_list, employee_client):
        s = EditSession(emp_list)
        s.open_edit(emp_list.get("e2"))
        assert s.values["name"] == "Bob Stone"
        s.set_value("name", "Bobby Stone")
        s.submit()
        assert employee_client.calls[-2][:2] == ("update", "e2")
        assert emp_list.get("e2").name == "Bobby Stone"

    def test_cancel_edit_leaves_list_and_makes_no_call(self, emp_list, employee_client):
        emp_list.set_query("s")
        before_all = list(emp_list.all)
        before_visible = emp_list.visible
        calls = len(employee_client.calls)
        s = EditSession(emp_list)
        s.open_edit(emp_list.get("e1"))
        s.set_value("name", "Someone Else")
        s.cancel()
        assert s.state is SessionState.IDLE
        assert s.values == {}
        assert emp_list.all == before_all
        assert emp_list.visible == before_visible
        assert len(employee_client.calls) == calls

    def test_open_twice_is_rejected(self, emp_list):
        s = EditSession(emp_list)
        s.open_create()
        with pytest.raises(RuntimeError):
            s.open_edit(emp_list.get("e1"))

    def test_validation_failure_makes_no_call(self, sale_list):
        client = sale_list.client
        before = list(client.calls)
        s = EditSession(sale_list)
        s.open_create()
        for k, v in {"productId": "p1", "volume": "abc", "totalSalePrice": "1",
                     "paymentMethod": "Cash", "date": "2024-01-01"}.items():
            s.set_value(k, v)
        with pytest.raises(ValidationError):
            s.submit()
        assert client.calls == before
        assert s.state is SessionState.CREATING
        assert "Volume" in s.last_error

    def test_transport_failure_keeps_form_and_list(self, emp_list, employee_client):
        s = EditSession(emp_list)
        s.open_edit(emp_list.get("e1"))
        s.set_value("name", "Changed")
        employee_client.fail_on.add("update")
        with pytest.raises(TransportError):
            s.submit()
        assert s.state is SessionState.EDITING
        assert s.values["name"] == "Changed"
        assert not s.in_flight
        assert emp_list.get("e1").name == "alice Smith"

    def test_late_response_after_cancel_is_ignored(self, emp_list):
        s = EditSession(emp_list)
        s.open_create()
        for k, v in _employee_form().items():
            s.set_value(k, v)
        pending = s.prepare()
        outcome = s.execute(pending)
        s.cancel()
        assert s.finish(pending, outcome) is False
        # the list was not replaced by the stale response
        assert "Dan Gray" not in _names(emp_list.all)

    def test_prepare_twice_is_rejected(self, emp_list):
        s = EditSession(emp_list)
        s.open_create()
        for k, v in _employee_form().items():
            s.set_value(k, v)
        s.prepare()
        with pytest.raises(RuntimeError):
            s.prepare()

    def test_refresh_failure_after_save(self, emp_list, employee_client):
        s = EditSession(emp_list)
        s.open_create()
        for k, v in _employee_form().items():
            s.set_value(k, v)
        pending = s.prepare()
        employee_client.fail_on.add("list")
        outcome = s.execute(pending)
        assert isinstance(outcome.refresh_error, TransportError)
        assert s.finish(pending, outcome) is True
        assert s.state is SessionState.IDLE

    def test_secret_field_not_prefilled(self):
        user = USERS.record_cls(firstName="Ada", lastName="King", type="Admin", phone="1",
                                email="ada@example.com", password="hash", address="x", id="u1")
        ctl = ListController(FakeClient([user]), USERS)
        ctl.refresh()
        s = EditSession(ctl)
        s.open_edit(ctl.get("u1"))
        assert s.values["password"] == ""
        s.submit()
        _, _, sent = ctl.client.calls[-2]
        assert "password" not in sent.to_payload()


class TestDelete:
    def test_confirmed_delete(self, emp_list, employee_client):
        s = EditSession(emp_list)
        assert s.delete(emp_list.get("e1"), confirm=lambda r: True) is True
        assert ("delete", "e1") in employee_client.calls
        assert emp_list.get("e1") is None

    def test_refused_delete_makes_no_call(self, emp_list, employee_client):
        s = EditSession(emp_list)
        before = list(employee_client.calls)
        assert s.delete(emp_list.get("e1"), confirm=lambda r: False) is False
        assert employee_client.calls == before
        assert emp_list.get("e1") is not None

    def test_failed_delete_keeps_list(self, emp_list, employee_client):
        employee_client.fail_on.add("delete")
        s = EditSession(emp_list)
        with pytest.raises(TransportError):
            s.delete(emp_list.get("e1"), confirm=lambda r: True)
        assert isinstance(emp_list.get("e1"), Employee)


class TestConnect:
    def test_reference_clients_share_the_screen_session(self):
        ctl = connect(SALES, "http://station.local/api", 4)
        products = ctl.reference_clients["products"]
        assert products.api is ctl.client.api
        assert products.endpoint == PRODUCTS.endpoint
        assert ctl.client.endpoint == "/sales"
        assert ctl.client.api.timeout == 4.0

    def test_each_screen_has_its_own_session(self):
        a = connect(EMPLOYEES, "http://station.local/api", 10)
        b = connect(PRODUCTS, "http://station.local/api", 10)
        assert a.client.api is not b.client.api
        assert a.reference_clients == {}
