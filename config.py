# config.py
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict

from utils import atomic_write_json, load_json_or_default

CONFIG_FILENAME = "station_console.json"
ENV_API_URL = "STATION_API_URL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def get_data_dir() -> Path:
    """
    設定・レポートの保存先。
    - exe化（PyInstaller）: exe と同じフォルダ
    - 通常実行: app.py と同じフォルダ
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parent


def _default_settings() -> Dict[str, Any]:
    return {
        "api_base_url": "http://localhost:5000/api",
        "request_timeout": 10,       # seconds
        "report_dir": "",            # "" -> <data dir>/reports
        "theme": "",                 # ttk theme name
        "log_level": "INFO",
        "log_file": "",              # "" -> console only
    }


class ConfigJSON:
    def __init__(self, path: str):
        self.path = path
        self.data: Dict[str, Any] = load_json_or_default(path, {"settings": _default_settings()})
        self._normalize()
        self._save()

    # -------------------------
    # Internal
    # -------------------------
    def _normalize(self) -> None:
        d = self.data
        if "settings" not in d or not isinstance(d["settings"], dict):
            d["settings"] = _default_settings()
        s = d["settings"]
        for k, v in _default_settings().items():
            s.setdefault(k, v)

        try:
            s["request_timeout"] = max(1, int(float(s["request_timeout"])))
        except (TypeError, ValueError):
            s["request_timeout"] = _default_settings()["request_timeout"]

        level = str(s.get("log_level") or "").upper()
        s["log_level"] = level if level in LOG_LEVELS else "INFO"

    def _save(self) -> None:
        atomic_write_json(self.path, self.data)

    # -------------------------
    # Settings
    # -------------------------
    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.data.get("settings", {}).get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        self.data.setdefault("settings", _default_settings())
        self.data["settings"][key] = value
        self._normalize()
        self._save()

    def reset_settings(self) -> None:
        self.data["settings"] = _default_settings()
        self._save()

    # -------------------------
    # Derived values
    # -------------------------
    @property
    def api_base_url(self) -> str:
        # 環境変数が優先（保存はしない）
        return os.environ.get(ENV_API_URL) or str(self.get_setting("api_base_url", ""))

    @property
    def request_timeout(self) -> float:
        return float(self.get_setting("request_timeout", 10))

    @property
    def report_dir(self) -> str:
        d = (self.get_setting("report_dir", "") or "").strip()
        if d:
            return d
        return str(Path(self.path).resolve().parent / "reports")

    def report_path(self, filename: str) -> str:
        os.makedirs(self.report_dir, exist_ok=True)
        return os.path.join(self.report_dir, filename)
