# errors.py
from __future__ import annotations

from typing import List, Optional, Tuple


class ConsoleError(Exception):
    """画面操作で起きる想定内のエラー（プロセスは落とさない）"""


class TransportError(ConsoleError):
    """通信失敗・タイムアウト・2xx 以外の応答"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ValidationError(ConsoleError):
    """送信前チェックの違反。全項目分の (field, message) を持つ。"""

    def __init__(self, violations: List[Tuple[str, str]], labels: Optional[dict] = None):
        self.violations = list(violations)
        self.labels = labels or {}
        super().__init__(self.describe())

    @property
    def fields(self) -> List[str]:
        return [f for f, _ in self.violations]

    def describe(self) -> str:
        lines = []
        for field, msg in self.violations:
            lines.append(f"{self.labels.get(field, field)}: {msg}")
        return "\n".join(lines)
