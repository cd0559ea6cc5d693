# ui/common.py
from __future__ import annotations

import logging
import queue
import threading
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Any, Callable, Optional

from errors import ConsoleError, ValidationError

logger = logging.getLogger(__name__)


def apply_theme(style: ttk.Style, theme_name: str) -> None:
    names = style.theme_names()
    if theme_name and theme_name in names:
        style.theme_use(theme_name)


def confirm_delete(parent, what: str, title: str = "Confirm delete") -> bool:
    return messagebox.askyesno(
        title,
        f"Are you sure to delete this {what}?\n\nThis cannot be undone.",
        parent=parent,
    )


def show_error(parent, e: BaseException, title: str = "Error") -> None:
    if isinstance(e, ValidationError):
        logger.info("validation failed: %s", e.fields)
        messagebox.showwarning("Invalid input", str(e), parent=parent)
        return
    if isinstance(e, ConsoleError):
        logger.warning("%s: %s", title, e)
    else:
        logger.error("%s: unexpected error", title, exc_info=e)
    messagebox.showerror(title, str(e) or e.__class__.__name__, parent=parent)


class TaskRunner:
    """
    通信を作業スレッドで実行し、結果を queue 経由で UI スレッドに戻す。
    1画面につき同時に1件だけ。
    """
    def __init__(self, widget: tk.Misc, poll_ms: int = 80):
        self.widget = widget
        self.poll_ms = poll_ms
        self.busy = False
        self._queue: queue.Queue = queue.Queue()

    def run(self, work: Callable[[], Any], on_done: Callable[[Any], None],
            on_error: Optional[Callable[[BaseException], None]] = None) -> bool:
        if self.busy:
            return False
        self.busy = True

        def target():
            try:
                result = work()
            except Exception as e:  # UI スレッドで on_error に渡す
                self._queue.put((None, e))
                return
            self._queue.put((result, None))

        threading.Thread(target=target, daemon=True).start()
        self.widget.after(self.poll_ms, lambda: self._poll(on_done, on_error))
        return True

    def _poll(self, on_done, on_error):
        try:
            result, err = self._queue.get_nowait()
        except queue.Empty:
            self.widget.after(self.poll_ms, lambda: self._poll(on_done, on_error))
            return
        self.busy = False
        if err is not None:
            if on_error is not None:
                on_error(err)
            else:
                show_error(self.widget, err)
            return
        on_done(result)
