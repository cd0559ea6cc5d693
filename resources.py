# resources.py
"""
管理対象リソースの定義（エンドポイント・検索キー・表の列・フォーム項目・レポート名）。
画面・コントローラ・レポートはこの定義だけを見て動く。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

import models
import schemas
from utils import date_str, format_money

MONEY_FIELDS = {"price", "pricePerUnit", "basePay", "bonus", "totalPay", "totalSalePrice", "amount"}

# 参照コレクション名 -> {id: record}
References = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = "text"          # text | number | int | date | time | choice | password | textarea | ref
    choices: Tuple[str, ...] = ()
    ref: str = ""               # kind == "ref" のときの参照コレクション名


@dataclass(frozen=True)
class Lookup:
    collection: str
    attr: str
    missing: str = "Unknown"


@dataclass(frozen=True)
class ResourceSpec:
    key: str
    title: str
    endpoint: str
    record_cls: Type[models.Record]
    schema: Type[schemas.FormSchema]
    columns: Tuple[Tuple[str, str], ...]
    form: Tuple[FieldSpec, ...]
    search_fields: Tuple[str, ...]
    search_label: str
    report_title: str
    report_file: str
    sortable: Tuple[str, ...] = ()
    secret_fields: Tuple[str, ...] = ()
    lookups: Dict[str, Lookup] = field(default_factory=dict)

    @property
    def references(self) -> List[str]:
        return sorted({lk.collection for lk in self.lookups.values()})

    def resolve(self, record: models.Record, name: str, refs: Optional[References] = None) -> Any:
        v = getattr(record, name, "")
        lk = self.lookups.get(name)
        if lk is None:
            return v
        target = (refs or {}).get(lk.collection, {}).get(v)
        if target is None:
            return lk.missing
        return getattr(target, lk.attr, lk.missing)

    def search_text(self, record: models.Record, refs: Optional[References] = None) -> List[str]:
        out = []
        for name in self.search_fields:
            v = getattr(record, name, "")
            if name in self.lookups:
                lk = self.lookups[name]
                target = (refs or {}).get(lk.collection, {}).get(v)
                v = getattr(target, lk.attr, "") if target is not None else ""
            out.append(str(v or ""))
        return out

    def cell(self, record: models.Record, name: str, refs: Optional[References] = None) -> str:
        v = self.resolve(record, name, refs)
        if v is None:
            return ""
        if isinstance(v, date):
            return date_str(v)
        if name in MONEY_FIELDS:
            return format_money(v)
        return str(v)

    def row(self, record: models.Record, refs: Optional[References] = None) -> List[str]:
        return [self.cell(record, name, refs) for name, _ in self.columns]

    @property
    def headers(self) -> List[str]:
        return [h for _, h in self.columns]


def _f(name: str, label: str, kind: str = "text", choices: Sequence[str] = (), ref: str = "") -> FieldSpec:
    return FieldSpec(name=name, label=label, kind=kind, choices=tuple(choices), ref=ref)


APPOINTMENTS = ResourceSpec(
    key="appointments",
    title="Appointment",
    endpoint="/appointments",
    record_cls=models.Appointment,
    schema=schemas.AppointmentSchema,
    columns=(
        ("carNumber", "Car Number"),
        ("carType", "Car Type"),
        ("vehicleType", "Vehicle Type"),
        ("paymentMethod", "Payment Method"),
        ("date", "Date"),
        ("time", "Time"),
        ("slotNumber", "Slot Number"),
        ("serviceType", "Service Type"),
        ("status", "Status"),
        ("price", "Price"),
    ),
    form=(
        _f("carNumber", "Car Number"),
        _f("carType", "Car Type"),
        _f("vehicleType", "Vehicle Type"),
        _f("paymentMethod", "Payment Method"),
        _f("date", "Date", "date"),
        _f("time", "Time (HH:MM)", "time"),
        _f("slotNumber", "Slot Number", "int"),
        _f("serviceType", "Service Type", "choice", schemas.SERVICE_TYPES),
        _f("status", "Status", "choice", schemas.APPOINTMENT_STATUSES),
        _f("price", "Price", "number"),
    ),
    search_fields=("carNumber",),
    search_label="Search by Car Number",
    report_title="Appointments Report",
    report_file="appointments_report.pdf",
)

EMPLOYEES = ResourceSpec(
    key="employees",
    title="Employee",
    endpoint="/employees",
    record_cls=models.Employee,
    schema=schemas.EmployeeSchema,
    columns=(
        ("name", "Name"),
        ("email", "Email"),
        ("phone", "Phone"),
        ("nicNumber", "NIC"),
        ("address", "Address"),
    ),
    form=(
        _f("name", "Name"),
        _f("email", "Email"),
        _f("phone", "Phone"),
        _f("nicNumber", "NIC"),
        _f("address", "Address", "textarea"),
    ),
    search_fields=("name",),
    search_label="Search by name",
    report_title="Employee Report",
    report_file="employee_report.pdf",
    sortable=("name",),
)

PRODUCTS = ResourceSpec(
    key="products",
    title="Product",
    endpoint="/products",
    record_cls=models.Product,
    schema=schemas.ProductSchema,
    columns=(
        ("name", "Name"),
        ("category", "Category"),
        ("quantity", "Quantity"),
        ("pricePerUnit", "Price Per Unit"),
        ("lastRestockDate", "Last Restock Date"),
    ),
    form=(
        _f("name", "Name"),
        _f("category", "Category"),
        _f("quantity", "Quantity", "int"),
        _f("pricePerUnit", "Price Per Unit", "number"),
        _f("lastRestockDate", "Last Restock Date", "date"),
    ),
    search_fields=("name",),
    search_label="Search by product name",
    report_title="Product Report",
    report_file="product_report.pdf",
)

SALARIES = ResourceSpec(
    key="salaries",
    title="Salary",
    endpoint="/salaries",
    record_cls=models.Salary,
    schema=schemas.SalarySchema,
    columns=(
        ("name", "Name"),
        ("basePay", "Base Pay"),
        ("bonus", "Bonus"),
        ("totalPay", "Total Pay"),
        ("workDays", "Work Days"),
        ("date", "Date"),
        ("phone", "Phone"),
    ),
    form=(
        _f("name", "Employee Name"),
        _f("basePay", "Base Pay", "number"),
        _f("bonus", "Bonus", "number"),
        _f("workDays", "Work Days", "int"),
        _f("date", "Date", "date"),
        _f("phone", "Phone"),
    ),
    search_fields=("name",),
    search_label="Search by employee name",
    report_title="Salary Report",
    report_file="salary_report.pdf",
)

SALES = ResourceSpec(
    key="sales",
    title="Sale",
    endpoint="/sales",
    record_cls=models.Sale,
    schema=schemas.SaleSchema,
    columns=(
        ("productId", "Product"),
        ("volume", "Volume"),
        ("totalSalePrice", "Total Sale Price"),
        ("paymentMethod", "Payment Method"),
        ("date", "Date"),
    ),
    form=(
        _f("productId", "Product", "ref", ref="products"),
        _f("volume", "Volume", "int"),
        _f("totalSalePrice", "Total Sale Price", "number"),
        _f("paymentMethod", "Payment Method", "choice", schemas.SALE_PAYMENT_METHODS),
        _f("date", "Date", "date"),
    ),
    search_fields=("productId",),
    search_label="Search by product",
    report_title="Sales Report",
    report_file="sales_report.pdf",
    lookups={"productId": Lookup("products", "name")},
)

UTILITY_EXPENSES = ResourceSpec(
    key="utility_expenses",
    title="Utility Expense",
    endpoint="/utility-expenses",
    record_cls=models.UtilityExpense,
    schema=schemas.UtilityExpenseSchema,
    columns=(
        ("type", "Type"),
        ("amount", "Amount ($)"),
        ("date", "Date"),
        ("description", "Description"),
    ),
    form=(
        _f("type", "Type", "choice", schemas.EXPENSE_TYPES),
        _f("amount", "Amount", "number"),
        _f("date", "Date", "date"),
        _f("description", "Description", "textarea"),
    ),
    search_fields=("type",),
    search_label="Search by type",
    report_title="Utility Expenses Report",
    report_file="utility_expenses_report.pdf",
)

USERS = ResourceSpec(
    key="users",
    title="User",
    endpoint="/users",
    record_cls=models.User,
    schema=schemas.UserSchema,
    columns=(
        ("firstName", "First Name"),
        ("lastName", "Last Name"),
        ("type", "Type"),
        ("phone", "Phone"),
        ("email", "Email"),
        ("address", "Address"),
    ),
    form=(
        _f("firstName", "First Name"),
        _f("lastName", "Last Name"),
        _f("type", "User Type", "choice", schemas.USER_TYPES),
        _f("phone", "Phone"),
        _f("email", "Email"),
        _f("password", "Password", "password"),
        _f("address", "Address"),
    ),
    search_fields=("firstName", "lastName", "email"),
    search_label="Search by name or email",
    report_title="User Report",
    report_file="user_report.pdf",
    secret_fields=("password",),
)

ENHANCED_EXPENSE_REPORT_FILE = "enhanced_utility_expenses_report.pdf"

ALL_RESOURCES: Tuple[ResourceSpec, ...] = (
    APPOINTMENTS, EMPLOYEES, PRODUCTS, SALARIES, SALES, UTILITY_EXPENSES, USERS,
)

BY_KEY: Dict[str, ResourceSpec] = {r.key: r for r in ALL_RESOURCES}
