# reports.py
"""
PDF レポート（reportlab）。

- 表形式: 全リソース共通。表示中（検索後）の一覧をそのまま1行ずつ出す。
- 統計: 光熱費のみ。合計・平均・最大・最小、種類別の内訳と構成比、
  明細、日付順、構成比の表をページを分けて出す。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models import Record, UtilityExpense
from resources import References, ResourceSpec, UTILITY_EXPENSES
from utils import date_str, format_money, format_percent, safe_float

logger = logging.getLogger(__name__)

NO_DATA = "No data"
HEADER_BG = colors.HexColor("#2980B9")     # autotable 風のヘッダ色
STRIPE_BG = colors.HexColor("#F5F5F5")


# -------------------------
# Aggregation
# -------------------------
@dataclass
class ExpenseSummary:
    count: int
    total: float
    average: Optional[float]
    maximum: Optional[float]
    minimum: Optional[float]
    by_type: Dict[str, float] = field(default_factory=dict)   # 初出順

    def percent(self, expense_type: str) -> str:
        return format_percent(self.by_type.get(expense_type, 0.0), self.total)

    def money(self, value: Optional[float]) -> str:
        return NO_DATA if value is None else f"${format_money(value)}"


def summarize_expenses(expenses: Sequence[UtilityExpense]) -> ExpenseSummary:
    amounts = [safe_float(e.amount) for e in expenses]
    total = sum(amounts)
    by_type: Dict[str, float] = {}
    for e, amount in zip(expenses, amounts):
        by_type[e.type] = by_type.get(e.type, 0.0) + amount

    # 0件のときは平均・最大・最小なし（"No data" と表示）
    if not amounts:
        return ExpenseSummary(0, 0.0, None, None, None, by_type)
    return ExpenseSummary(
        count=len(amounts),
        total=total,
        average=total / len(amounts),
        maximum=max(amounts),
        minimum=min(amounts),
        by_type=by_type,
    )


def sorted_by_date(expenses: Sequence[UtilityExpense]) -> List[UtilityExpense]:
    # 日付なしは最後。同じ日付は元の順番のまま。
    return sorted(expenses, key=lambda e: (e.date is None, e.date or date.min))


# -------------------------
# Layout helpers
# -------------------------
def _table(head: List[str], body: List[List[str]], width: float) -> Table:
    data = [head] + (body or [[""] * len(head)])
    t = Table(data, repeatRows=1, colWidths=[width / len(head)] * len(head))
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#BDC3C7")),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]
    for i in range(2, len(data), 2):
        style.append(("BACKGROUND", (0, i), (-1, i), STRIPE_BG))
    t.setStyle(TableStyle(style))
    return t


def _doc(path: str, title: str, wide: bool = False) -> SimpleDocTemplate:
    return SimpleDocTemplate(
        path,
        pagesize=landscape(A4) if wide else A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )


def _wrap_cells(rows: List[List[str]], style) -> List[List[Paragraph]]:
    return [[Paragraph(_escape(c), style) for c in r] for r in rows]


def _escape(s: str) -> str:
    return (s or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


# -------------------------
# Reports
# -------------------------
def build_table_report(path: str, spec: ResourceSpec, records: Sequence[Record],
                       refs: Optional[References] = None) -> str:
    """表示中の一覧を表形式で出力する。入力の順番を保つ。"""
    wide = len(spec.columns) > 6
    doc = _doc(path, spec.report_title, wide=wide)
    styles = getSampleStyleSheet()
    body = _wrap_cells([spec.row(r, refs) for r in records], styles["BodyText"])
    story = [
        Paragraph(spec.report_title, styles["Title"]),
        Spacer(1, 6),
        _table(spec.headers, body, doc.width),
    ]
    doc.build(story)
    logger.info("%s: wrote %s (%d rows)", spec.key, path, len(records))
    return path


def build_expense_report(path: str, expenses: Sequence[UtilityExpense],
                         generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    summary = summarize_expenses(expenses)
    doc = _doc(path, "Utility Expenses Detailed Report")
    styles = getSampleStyleSheet()
    h1, h2, body = styles["Title"], styles["Heading2"], styles["BodyText"]

    story: list = [
        Paragraph("Utility Expenses Detailed Report", h1),
        Paragraph(f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}", body),
        Spacer(1, 10),
        Paragraph("Summary Statistics", h2),
        Paragraph(f"Total Expenses: ${format_money(summary.total)}", body),
        Paragraph(f"Average Expense: {summary.money(summary.average)}", body),
        Paragraph(f"Highest Expense: {summary.money(summary.maximum)}", body),
        Paragraph(f"Lowest Expense: {summary.money(summary.minimum)}", body),
        PageBreak(),
        Paragraph("Expense Breakdown by Type", h2),
    ]
    if summary.by_type:
        for t, amount in summary.by_type.items():
            story.append(Paragraph(f"{_escape(t)}: ${format_money(amount)}", body))
    else:
        story.append(Paragraph(NO_DATA, body))

    story += [
        PageBreak(),
        Paragraph("Detailed Expense List", h2),
        _table(UTILITY_EXPENSES.headers,
               _wrap_cells([UTILITY_EXPENSES.row(e) for e in expenses], body), doc.width),
        PageBreak(),
        Paragraph("Expenses Over Time", h2),
        _table(["Date", "Type", "Amount ($)"],
               [[date_str(e.date), e.type, format_money(e.amount)] for e in sorted_by_date(expenses)],
               doc.width),
        PageBreak(),
        Paragraph("Expense Distribution by Type", h2),
        _table(["Type", "Total Amount ($)", "Percentage"],
               [[t, format_money(a), summary.percent(t)] for t, a in summary.by_type.items()],
               doc.width),
    ]
    doc.build(story)
    logger.info("utility_expenses: wrote %s (%d rows)", path, len(expenses))
    return path
