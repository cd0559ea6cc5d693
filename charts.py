# charts.py
from __future__ import annotations

from datetime import date
from typing import Dict, List, Sequence, Tuple

from matplotlib import rcParams
from matplotlib.figure import Figure

from models import UtilityExpense
from utils import safe_float

rcParams["font.family"] = "sans-serif"
rcParams["font.sans-serif"] = ["Segoe UI", "Helvetica", "Arial", "DejaVu Sans"]
rcParams["axes.unicode_minus"] = False


def expense_series(expenses: Sequence[UtilityExpense]) -> Dict[str, Tuple[List[date], List[float]]]:
    """種類ごとに日付順の (日付, 金額) 列を作る。日付なしは除外。"""
    out: Dict[str, Tuple[List[date], List[float]]] = {}
    rows = sorted((e for e in expenses if e.date is not None), key=lambda e: e.date)
    for e in rows:
        xs, ys = out.setdefault(e.type, ([], []))
        xs.append(e.date)
        ys.append(safe_float(e.amount))
    return out


def plot_expenses(ax, expenses: Sequence[UtilityExpense]) -> None:
    ax.clear()
    series = expense_series(expenses)
    if not series:
        ax.set_title("No data")
        return
    for t, (xs, ys) in series.items():
        ax.plot(xs, ys, marker="o", label=t)
    ax.set_title("Utility Expenses Over Time")
    ax.set_xlabel("Date")
    ax.set_ylabel("Amount ($)")
    ax.legend(loc="upper left", fontsize="small")


def expense_figure(expenses: Sequence[UtilityExpense]) -> Figure:
    fig = Figure(figsize=(10, 4), dpi=100)
    ax = fig.add_subplot(111)
    plot_expenses(ax, expenses)
    fig.autofmt_xdate()
    return fig
