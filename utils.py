# utils.py
from __future__ import annotations

import os
import json
import math
from datetime import datetime, date
from typing import Any, Dict, Optional


def parse_date_yyyy_mm_dd(s: str) -> date:
    # "2026-01-11"
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def parse_api_date(value: Any) -> Optional[date]:
    """
    サーバーから返る日付を date にする。
    - "2024-03-01"
    - "2024-03-01T00:00:00.000Z"
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        return parse_date_yyyy_mm_dd(s[:10])


def date_str(value: Optional[date]) -> str:
    return value.isoformat() if value else ""


def safe_float(s: Any, default: float = 0.0) -> float:
    try:
        v = float(str(s).strip())
    except (TypeError, ValueError):
        return default
    return v if math.isfinite(v) else default


def atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    tmp = path + ".tmp"
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    os.replace(tmp, path)


def load_json_or_default(path: str, default: Dict[str, Any]) -> Dict[str, Any]:
    if not os.path.exists(path):
        return default
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def format_money(value: Any, decimals: int = 2) -> str:
    """
    金額は常に小数点以下 decimals 桁、カンマ区切り。
    数値にならない値はそのまま文字列にする。
    """
    try:
        return f"{float(value):,.{int(decimals)}f}"
    except (TypeError, ValueError):
        return str(value)


def format_percent(part: float, whole: float) -> str:
    if not whole:
        return "0.00%"
    return f"{(part / whole) * 100:.2f}%"
