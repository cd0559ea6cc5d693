# models.py
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, Optional

from utils import parse_api_date, date_str, safe_float


def _record_id(d: Dict[str, Any]) -> Optional[str]:
    rid = d.get("_id", d.get("id"))
    return str(rid) if rid not in (None, "") else None


class Record:
    """
    サーバーと JSON でやり取りするレコードの共通処理。
    id はサーバー採番（作成前は None）。
    """
    DATE_FIELDS: tuple = ()
    INT_FIELDS: tuple = ()
    FLOAT_FIELDS: tuple = ()

    @classmethod
    def from_api(cls, d: Dict[str, Any]):
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "id":
                kwargs["id"] = _record_id(d)
                continue
            if f.name not in d:
                continue
            v = d[f.name]
            if f.name in cls.DATE_FIELDS:
                v = parse_api_date(v)
            elif f.name in cls.INT_FIELDS:
                v = int(safe_float(v))
            elif f.name in cls.FLOAT_FIELDS:
                v = safe_float(v)
            elif v is None:
                v = ""
            else:
                v = str(v)
            kwargs[f.name] = v
        return cls(**kwargs)

    def to_payload(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            if f.name == "id":
                continue
            v = getattr(self, f.name)
            if isinstance(v, date):
                v = date_str(v)
            out[f.name] = v
        return out

    def form_values(self, secret_fields: tuple = ()) -> Dict[str, str]:
        """編集フォームの初期値。秘密項目は空のまま返す。"""
        out: Dict[str, str] = {}
        for f in fields(self):
            if f.name == "id":
                continue
            if f.name in secret_fields:
                out[f.name] = ""
                continue
            v = getattr(self, f.name)
            if v is None:
                out[f.name] = ""
            elif isinstance(v, date):
                out[f.name] = date_str(v)
            elif isinstance(v, float) and v.is_integer():
                out[f.name] = str(int(v))
            else:
                out[f.name] = str(v)
        return out


@dataclass
class Appointment(Record):
    carNumber: str = ""
    carType: str = ""
    vehicleType: str = ""
    paymentMethod: str = ""
    date: Optional[date] = None
    time: str = ""
    slotNumber: int = 0
    serviceType: str = ""
    status: str = ""
    price: float = 0.0
    id: Optional[str] = None

    DATE_FIELDS = ("date",)
    INT_FIELDS = ("slotNumber",)
    FLOAT_FIELDS = ("price",)


@dataclass
class Employee(Record):
    name: str = ""
    email: str = ""
    phone: str = ""
    nicNumber: str = ""
    address: str = ""
    id: Optional[str] = None


@dataclass
class Product(Record):
    name: str = ""
    category: str = ""
    quantity: int = 0
    pricePerUnit: float = 0.0
    lastRestockDate: Optional[date] = None
    id: Optional[str] = None

    DATE_FIELDS = ("lastRestockDate",)
    INT_FIELDS = ("quantity",)
    FLOAT_FIELDS = ("pricePerUnit",)


@dataclass
class Salary(Record):
    name: str = ""
    basePay: float = 0.0
    bonus: float = 0.0
    totalPay: float = 0.0
    workDays: int = 0
    date: Optional[date] = None
    phone: str = ""
    id: Optional[str] = None

    DATE_FIELDS = ("date",)
    INT_FIELDS = ("workDays",)
    FLOAT_FIELDS = ("basePay", "bonus", "totalPay")


@dataclass
class Sale(Record):
    productId: str = ""
    volume: int = 0
    totalSalePrice: float = 0.0
    paymentMethod: str = ""
    date: Optional[date] = None
    id: Optional[str] = None

    DATE_FIELDS = ("date",)
    INT_FIELDS = ("volume",)
    FLOAT_FIELDS = ("totalSalePrice",)


@dataclass
class UtilityExpense(Record):
    type: str = ""
    amount: float = 0.0
    date: Optional[date] = None
    description: str = ""
    id: Optional[str] = None

    DATE_FIELDS = ("date",)
    FLOAT_FIELDS = ("amount",)


@dataclass
class User(Record):
    firstName: str = ""
    lastName: str = ""
    type: str = ""
    phone: str = ""
    email: str = ""
    password: str = ""
    address: str = ""
    id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        out = super().to_payload()
        # 空のパスワードは「変更なし」として送らない
        if not out.get("password"):
            out.pop("password", None)
        return out
