# ui/expense_tabs.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

import matplotlib
matplotlib.use("TkAgg")
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure

from charts import plot_expenses
from reports import build_expense_report
from resources import ENHANCED_EXPENSE_REPORT_FILE
from ui.common import show_error
from ui.resource_tabs import ResourceFrame
from utils import format_money


class UtilityExpenseFrame(ResourceFrame):
    """
    光熱費: 共通の一覧に加えて、統計レポート・合計表示・推移グラフ。
    """
    def __init__(self, parent, list_ctl, session, config):
        super().__init__(parent, list_ctl, session, config)

        fig = Figure(figsize=(10, 3.2), dpi=100)
        self.ax = fig.add_subplot(111)
        self.canvas = FigureCanvasTkAgg(fig, master=self)
        self.canvas.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(0, 8))
        self.fig = fig

    def build_report_buttons(self, top):
        super().build_report_buttons(top)
        ttk.Button(top, text="Generate Enhanced Report", command=self.on_enhanced_report).pack(side="right", padx=4)

        self.show_total = False
        self.var_total = tk.StringVar(value="")
        self.btn_total = ttk.Button(top, text="Show Total Amount", command=self.toggle_total)
        self.btn_total.pack(side="right", padx=4)
        ttk.Label(top, textvariable=self.var_total).pack(side="right", padx=8)

    def render(self):
        super().render()
        self._update_total()
        # 初期化中（グラフ未作成）の render は一覧だけ
        if getattr(self, "canvas", None) is None:
            return
        plot_expenses(self.ax, self.list.visible)
        self.fig.autofmt_xdate()
        self.canvas.draw()

    # -------------------------
    # Total
    # -------------------------
    def toggle_total(self):
        self.show_total = not self.show_total
        self.btn_total.configure(text="Hide Total Amount" if self.show_total else "Show Total Amount")
        self._update_total()

    def _update_total(self):
        if not self.show_total:
            self.var_total.set("")
            return
        self.var_total.set(f"Total Amount: ${format_money(self.list.total('amount'))}")

    # -------------------------
    # Statistical report
    # -------------------------
    def on_enhanced_report(self):
        try:
            path = build_expense_report(
                self.config.report_path(ENHANCED_EXPENSE_REPORT_FILE),
                self.list.visible,
            )
        except Exception as e:
            show_error(self, e, title="Report error")
            return
        messagebox.showinfo("Report", f"Enhanced report saved:\n{path}", parent=self)
