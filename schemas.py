# schemas.py
"""
フォーム入力の検証。

画面からは文字列で渡される。前後の空白を除き、数値・日付へ変換し、
選択肢や形式をチェックして、違反した項目をすべてまとめて返す。
通ったものは REST クライアントが送るレコード（dataclass）になる。
"""
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

import models
from errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")

SERVICE_TYPES = ("Oil Change", "Tire Rotation", "Brake Inspection")
APPOINTMENT_STATUSES = ("Pending", "Completed", "Cancelled")
SALE_PAYMENT_METHODS = ("Cash", "Credit Card", "Mobile Payment")
EXPENSE_TYPES = ("Electricity", "Water", "Internet", "Gas", "Other")
USER_TYPES = ("Admin", "User")


def _required(title: str, **kw) -> Any:
    return Field(..., title=title, min_length=1, **kw)


def _amount(title: str, default: Any = ...) -> Any:
    return Field(default, title=title, ge=0, allow_inf_nan=False)


def _truncate(v: Any) -> Any:
    # 個数・日数などは小数で入力されたら整数部だけ使う（"12.5" -> 12）
    if isinstance(v, str):
        try:
            v = float(v)
        except ValueError:
            return v
    if isinstance(v, float):
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return math.trunc(v)
    return v


WholeNumber = Annotated[int, BeforeValidator(_truncate)]


class FormSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    RECORD: ClassVar[Type[models.Record]]

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        # 空欄は「未入力」として扱う（必須なら missing、任意なら既定値）
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items()
                    if not (v is None or (isinstance(v, str) and not v.strip()))}
        return data

    def to_record(self, record_id: Optional[str] = None) -> models.Record:
        return self.RECORD(**self.model_dump(), id=record_id)

    @classmethod
    def labels(cls) -> Dict[str, str]:
        return {name: (f.title or name) for name, f in cls.model_fields.items()}


class AppointmentSchema(FormSchema):
    RECORD = models.Appointment

    carNumber: str = _required("Car Number")
    carType: str = _required("Car Type")
    vehicleType: str = _required("Vehicle Type")
    paymentMethod: str = _required("Payment Method")
    date: dt.date = Field(..., title="Date")
    time: str = _required("Time")
    slotNumber: WholeNumber = Field(..., title="Slot Number", ge=0)
    serviceType: Literal[SERVICE_TYPES] = Field(..., title="Service Type")
    status: Literal[APPOINTMENT_STATUSES] = Field(..., title="Status")
    price: float = _amount("Price")

    @field_validator("time")
    @classmethod
    def _time_shape(cls, v: str) -> str:
        if not TIME_RE.match(v):
            raise ValueError("must be a time as HH:MM")
        return v


class EmployeeSchema(FormSchema):
    RECORD = models.Employee

    name: str = _required("Name")
    email: str = _required("Email")
    phone: str = _required("Phone")
    nicNumber: str = _required("NIC")
    address: str = Field("", title="Address")


class ProductSchema(FormSchema):
    RECORD = models.Product

    name: str = _required("Name")
    category: str = _required("Category")
    quantity: WholeNumber = Field(..., title="Quantity", ge=0)
    pricePerUnit: float = _amount("Price Per Unit")
    lastRestockDate: dt.date = Field(..., title="Last Restock Date")


class SalarySchema(FormSchema):
    RECORD = models.Salary

    name: str = _required("Name")
    basePay: float = _amount("Base Pay")
    bonus: float = _amount("Bonus", 0.0)
    workDays: WholeNumber = Field(..., title="Work Days", ge=0)
    date: dt.date = Field(..., title="Date")
    phone: str = Field("", title="Phone")

    def to_record(self, record_id: Optional[str] = None) -> models.Record:
        data = self.model_dump()
        data["totalPay"] = self.basePay + self.bonus
        return self.RECORD(**data, id=record_id)


class SaleSchema(FormSchema):
    RECORD = models.Sale

    productId: str = _required("Product")
    volume: WholeNumber = Field(..., title="Volume", ge=0)
    totalSalePrice: float = _amount("Total Sale Price")
    paymentMethod: Literal[SALE_PAYMENT_METHODS] = Field(..., title="Payment Method")
    date: dt.date = Field(..., title="Date")


class UtilityExpenseSchema(FormSchema):
    RECORD = models.UtilityExpense

    type: Literal[EXPENSE_TYPES] = Field(..., title="Type")
    amount: float = _amount("Amount")
    date: dt.date = Field(..., title="Date")
    description: str = Field("", title="Description")


class UserSchema(FormSchema):
    RECORD = models.User

    firstName: str = _required("First Name")
    lastName: str = _required("Last Name")
    type: Literal[USER_TYPES] = Field(..., title="User Type")
    phone: str = _required("Phone")
    email: str = _required("Email")
    password: str = Field("", title="Password", validate_default=True)
    address: str = _required("Address")

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("must be a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def _password_on_create(cls, v: str, info: ValidationInfo) -> str:
        # 編集時は空欄なら変更なし
        if not v and (info.context or {}).get("creating", True):
            raise ValueError("is required")
        return v


def _message(err: Dict[str, Any]) -> str:
    kind = err.get("type", "")
    if kind == "missing" or kind == "string_too_short":
        return "is required"
    if kind in ("int_parsing", "int_from_float", "float_parsing", "int_type", "float_type"):
        return "must be a number"
    if kind == "finite_number":
        return "must be a finite number"
    if kind == "greater_than_equal":
        return "must not be negative"
    if kind.startswith("date"):
        return "must be a valid date (YYYY-MM-DD)"
    if kind == "literal_error":
        expected = (err.get("ctx") or {}).get("expected", "")
        return f"must be one of {expected}"
    msg = str(err.get("msg", "is invalid"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return msg


def violations_from(exc: PydanticValidationError) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    seen = set()
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        field = str(loc[0])
        if field in seen:
            continue
        seen.add(field)
        out.append((field, _message(err)))
    return out


def validate(schema: Type[FormSchema], values: Mapping[str, Any], *,
             creating: bool = True, record_id: Optional[str] = None) -> models.Record:
    """
    values を検証して正規化済みレコードを返す。
    違反があれば ValidationError（全項目分）。
    """
    try:
        parsed = schema.model_validate(dict(values), context={"creating": creating})
    except PydanticValidationError as e:
        raise ValidationError(violations_from(e), labels=schema.labels()) from None
    return parsed.to_record(record_id)
