# ui/resource_tabs.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Optional

from config import ConfigJSON
from controllers import EditSession, ListController, PendingSubmit, SubmitOutcome
from errors import ValidationError
from models import Record
from reports import build_table_report
from ui.common import TaskRunner, confirm_delete, show_error
from ui.record_dialog import RecordDialog


class ResourceFrame(ttk.Frame):
    """
    1リソース分の画面: 検索・一覧・追加/編集/削除・レポート。
    """
    def __init__(self, parent, list_ctl: ListController, session: EditSession, config: ConfigJSON):
        super().__init__(parent)
        self.list = list_ctl
        self.session = session
        self.spec = list_ctl.spec
        self.config = config
        self.runner = TaskRunner(self)
        self.dialog: Optional[RecordDialog] = None

        top = ttk.Frame(self)
        top.pack(fill="x", padx=8, pady=(8, 4))

        ttk.Label(top, text=self.spec.search_label).pack(side="left", padx=(0, 4))
        self.var_query = tk.StringVar(value="")
        ttk.Entry(top, textvariable=self.var_query, width=30).pack(side="left", padx=4)
        self.var_query.trace_add("write", lambda *_: self.on_search())

        ttk.Button(top, text=f"Add {self.spec.title}", command=self.on_add).pack(side="left", padx=(12, 4))
        ttk.Button(top, text="Edit", command=self.on_edit).pack(side="left", padx=4)
        ttk.Button(top, text="Delete", command=self.on_delete).pack(side="left", padx=4)
        ttk.Button(top, text="Refresh", command=self.refresh).pack(side="left", padx=4)
        self.build_report_buttons(top)

        self.var_status = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.var_status).pack(anchor="w", padx=10)

        table = ttk.Frame(self)
        table.pack(fill="both", expand=True, padx=8, pady=4)

        cols = [name for name, _ in self.spec.columns]
        self.tree = ttk.Treeview(table, columns=cols, show="headings", height=16)
        for name, header in self.spec.columns:
            if name in self.spec.sortable:
                self.tree.heading(name, text=header, command=lambda n=name: self.on_sort(n))
            else:
                self.tree.heading(name, text=header)
            self.tree.column(name, width=120, anchor="w")
        ysb = ttk.Scrollbar(table, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=ysb.set)
        self.tree.pack(side="left", fill="both", expand=True)
        ysb.pack(side="right", fill="y")
        self.tree.bind("<Double-1>", lambda e: self.on_edit())

    def build_report_buttons(self, top):
        ttk.Button(top, text="Generate Report", command=self.on_report).pack(side="right", padx=4)

    # -------------------------
    # List
    # -------------------------
    def render(self):
        self.tree.delete(*self.tree.get_children())
        for r in self.list.visible:
            self.tree.insert("", "end", iid=r.id or None, values=self.spec.row(r, self.list.refs))
        self.var_status.set(f"{len(self.list.visible)} / {len(self.list.all)} records")

    def refresh(self):
        def done(result):
            self.list.load(*result)
            self.render()

        if not self.runner.run(self.list.fetch, done, self._on_load_error):
            self.var_status.set("Busy, please wait...")
            return
        self.var_status.set("Loading...")

    def _on_load_error(self, e):
        # 前回の一覧はそのまま
        self.render()
        show_error(self, e, title=f"Failed to load {self.spec.key}")

    def on_search(self):
        self.list.set_query(self.var_query.get())
        self.render()

    def on_sort(self, field: str):
        cur = self.list.sort
        desc = bool(cur and cur[0] == field and not cur[1])
        self.list.sort_by(field, descending=desc)
        self.render()

    def _selected(self) -> Optional[Record]:
        sel = self.tree.selection()
        if not sel:
            return None
        return self.list.get(sel[0])

    # -------------------------
    # Add / edit
    # -------------------------
    def on_add(self):
        if self.session.is_open:
            return
        self.session.open_create()
        self._open_dialog(editing=False)

    def on_edit(self):
        rec = self._selected()
        if rec is None:
            messagebox.showwarning("Edit", f"Select a {self.spec.title.lower()} first", parent=self)
            return
        if self.session.is_open:
            return
        self.session.open_edit(rec)
        self._open_dialog(editing=True)

    def _open_dialog(self, editing: bool):
        self.dialog = RecordDialog(
            self, self.spec, self.session.values,
            editing=editing,
            refs=self.list.refs,
            on_submit=self._on_dialog_submit,
            on_cancel=self._on_dialog_cancel,
        )

    def _on_dialog_cancel(self, dlg: RecordDialog):
        self.session.cancel()
        dlg.close()
        self.dialog = None

    def _on_dialog_submit(self, dlg: RecordDialog):
        for k, v in dlg.values().items():
            self.session.set_value(k, v)
        try:
            pending = self.session.prepare()
        except ValidationError as e:
            show_error(dlg, e)
            return
        except RuntimeError:
            # 送信中の二度押し
            dlg.var_status.set("Busy, please wait...")
            return

        def done(outcome: SubmitOutcome):
            self._on_saved(dlg, pending, outcome)

        def failed(e):
            if self.session.fail(pending, e):
                dlg.set_busy(False)
                show_error(dlg, e, title=f"Failed to save {self.spec.title.lower()}")

        if not self.runner.run(lambda: self.session.execute(pending), done, failed):
            self.session.fail(pending, RuntimeError("busy"))
            dlg.var_status.set("Busy, please wait...")
            return
        dlg.set_busy(True)

    def _on_saved(self, dlg: RecordDialog, pending: PendingSubmit, outcome: SubmitOutcome):
        creating = pending.target_id is None
        if not self.session.finish(pending, outcome):
            return
        dlg.close()
        self.dialog = None
        self.render()
        verb = "created" if creating else "updated"
        messagebox.showinfo("Success", f"{self.spec.title} {verb} successfully!", parent=self)
        if outcome.refresh_error is not None:
            show_error(self, outcome.refresh_error, title="Saved, but the list could not be refreshed")

    # -------------------------
    # Delete
    # -------------------------
    def on_delete(self):
        rec = self._selected()
        if rec is None:
            messagebox.showwarning("Delete", f"Select a {self.spec.title.lower()} first", parent=self)
            return
        if not confirm_delete(self, self.spec.title.lower()):
            return

        def done(result):
            self.list.load(*result)
            self.render()
            messagebox.showinfo("Success", f"{self.spec.title} deleted successfully!", parent=self)

        def failed(e):
            show_error(self, e, title=f"Failed to delete {self.spec.title.lower()}")

        if not self.runner.run(lambda: self.session.execute_delete(rec), done, failed):
            self.var_status.set("Busy, please wait...")

    # -------------------------
    # Report
    # -------------------------
    def on_report(self):
        try:
            path = build_table_report(
                self.config.report_path(self.spec.report_file),
                self.spec, self.list.visible, self.list.refs,
            )
        except Exception as e:
            show_error(self, e, title="Report error")
            return
        messagebox.showinfo("Report", f"Report saved:\n{path}", parent=self)
