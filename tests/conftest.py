"""
Shared fixtures: project root on sys.path and an in-memory resource client.
"""
import copy
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from errors import TransportError
from models import Employee, Product, Sale, UtilityExpense


class FakeClient:
    """ResourceClient stand-in. Records calls; `fail_on` makes an operation raise."""

    def __init__(self, records=None):
        self.rows = [copy.deepcopy(r) for r in (records or [])]
        self.calls = []
        self.fail_on = set()
        self._next = 1

    def _maybe_fail(self, op):
        if op in self.fail_on:
            raise TransportError(f"{op} failed", status=500)

    def list(self):
        self.calls.append(("list",))
        self._maybe_fail("list")
        return [copy.deepcopy(r) for r in self.rows]

    def create(self, record):
        self.calls.append(("create", record))
        self._maybe_fail("create")
        saved = copy.deepcopy(record)
        saved.id = f"new{self._next}"
        self._next += 1
        self.rows.append(saved)
        return copy.deepcopy(saved)

    def update(self, record_id, record):
        self.calls.append(("update", record_id, record))
        self._maybe_fail("update")
        saved = copy.deepcopy(record)
        saved.id = record_id
        self.rows = [saved if r.id == record_id else r for r in self.rows]
        return copy.deepcopy(saved)

    def delete(self, record_id):
        self.calls.append(("delete", record_id))
        self._maybe_fail("delete")
        self.rows = [r for r in self.rows if r.id != record_id]

    def ops(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def employees():
    return [
        Employee(name="Charlie Brown", email="c@example.com", phone="0771", nicNumber="N3", id="e3"),
        Employee(name="alice Smith", email="a@example.com", phone="0772", nicNumber="N1", id="e1"),
        Employee(name="Bob Stone", email="b@example.com", phone="0773", nicNumber="N2", id="e2"),
    ]


@pytest.fixture
def employee_client(employees):
    return FakeClient(employees)


@pytest.fixture
def products():
    return [
        Product(name="Diesel", category="Fuel", quantity=100, pricePerUnit=1.5,
                lastRestockDate=date(2024, 1, 2), id="p1"),
        Product(name="Engine Oil", category="Lubricant", quantity=20, pricePerUnit=12.0,
                lastRestockDate=date(2024, 1, 5), id="p2"),
    ]


@pytest.fixture
def sales():
    return [
        Sale(productId="p1", volume=10, totalSalePrice=15.0, paymentMethod="Cash",
             date=date(2024, 2, 1), id="s1"),
        Sale(productId="p2", volume=2, totalSalePrice=24.0, paymentMethod="Credit Card",
             date=date(2024, 2, 2), id="s2"),
        Sale(productId="gone", volume=1, totalSalePrice=1.0, paymentMethod="Cash",
             date=date(2024, 2, 3), id="s3"),
    ]


@pytest.fixture
def expenses():
    return [
        UtilityExpense(type="Electricity", amount=10.0, date=date(2024, 3, 1), id="u1"),
        UtilityExpense(type="Water", amount=20.0, date=date(2024, 1, 1), id="u2"),
        UtilityExpense(type="Electricity", amount=20.0, date=date(2024, 2, 1), id="u3"),
        UtilityExpense(type="Water", amount=10.0, date=None, id="u4"),
    ]
