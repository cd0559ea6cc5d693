# ui/record_dialog.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, Mapping, Optional

from resources import FieldSpec, References, ResourceSpec


def ref_label(record_id: str, name: str) -> str:
    return f"{record_id} | {name}"


def ref_id(label: str) -> str:
    if " | " not in label:
        return label.strip()
    return label.split(" | ", 1)[0].strip()


class RecordDialog(tk.Toplevel):
    """
    追加/編集のモーダル。値の検証と送信は呼び出し側（EditSession）が行う。
    """
    def __init__(self, parent, spec: ResourceSpec, values: Mapping[str, str], *,
                 editing: bool,
                 refs: Optional[References] = None,
                 on_submit: Callable[["RecordDialog"], None],
                 on_cancel: Callable[["RecordDialog"], None]):
        super().__init__(parent)
        self.spec = spec
        self.editing = editing
        self.refs = refs or {}
        self.on_submit = on_submit
        self.on_cancel = on_cancel

        self.title(f"{'Edit' if editing else 'Add'} {spec.title}")
        self.transient(parent.winfo_toplevel())
        self.resizable(False, False)
        self.protocol("WM_DELETE_WINDOW", lambda: self.on_cancel(self))

        frm = ttk.Frame(self)
        frm.pack(fill="both", expand=True, padx=12, pady=10)

        self._vars: Dict[str, tk.StringVar] = {}
        self._texts: Dict[str, tk.Text] = {}
        for row, f in enumerate(spec.form):
            ttk.Label(frm, text=self._label(f)).grid(row=row, column=0, sticky="nw", padx=4, pady=3)
            self._build_input(frm, row, f, values.get(f.name, ""))

        btns = ttk.Frame(self)
        btns.pack(fill="x", padx=12, pady=(0, 10))
        self.btn_submit = ttk.Button(btns, text="Update" if editing else "Add", command=lambda: self.on_submit(self))
        self.btn_submit.pack(side="right", padx=4)
        ttk.Button(btns, text="Cancel", command=lambda: self.on_cancel(self)).pack(side="right", padx=4)

        self.var_status = tk.StringVar(value="")
        ttk.Label(btns, textvariable=self.var_status).pack(side="left", padx=4)

        self.grab_set()

    def _label(self, f: FieldSpec) -> str:
        if f.kind == "date":
            return f"{f.label} (YYYY-MM-DD)"
        if f.kind == "password" and self.editing:
            return f"{f.label} (blank = unchanged)"
        return f.label

    def _build_input(self, frm, row: int, f: FieldSpec, value: str):
        if f.kind == "textarea":
            txt = tk.Text(frm, width=40, height=3)
            txt.insert("1.0", value)
            txt.grid(row=row, column=1, sticky="w", padx=4, pady=3)
            self._texts[f.name] = txt
            return

        var = tk.StringVar(value=value)
        self._vars[f.name] = var
        if f.kind == "choice":
            w = ttk.Combobox(frm, textvariable=var, values=list(f.choices), state="readonly", width=38)
        elif f.kind == "ref":
            rows = self.refs.get(f.ref, {})
            labels = [ref_label(rid, getattr(r, "name", "")) for rid, r in rows.items()]
            if value in rows:
                var.set(ref_label(value, getattr(rows[value], "name", "")))
            w = ttk.Combobox(frm, textvariable=var, values=labels, state="readonly", width=38)
        elif f.kind == "password":
            w = ttk.Entry(frm, textvariable=var, show="*", width=40)
        else:
            w = ttk.Entry(frm, textvariable=var, width=40)
        w.grid(row=row, column=1, sticky="w", padx=4, pady=3)

    def values(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for f in self.spec.form:
            if f.name in self._texts:
                out[f.name] = self._texts[f.name].get("1.0", "end-1c")
            elif f.kind == "ref":
                out[f.name] = ref_id(self._vars[f.name].get())
            else:
                out[f.name] = self._vars[f.name].get()
        return out

    def set_busy(self, busy: bool) -> None:
        self.btn_submit.configure(state="disabled" if busy else "normal")
        self.var_status.set("Saving..." if busy else "")

    def close(self) -> None:
        self.grab_release()
        self.destroy()
