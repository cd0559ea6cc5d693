# app.py
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk, messagebox

from config import CONFIG_FILENAME, ConfigJSON, get_data_dir
from controllers import EditSession, connect
from log_setup import configure_logging
from resources import ALL_RESOURCES, UTILITY_EXPENSES
from ui.common import apply_theme
from ui.expense_tabs import UtilityExpenseFrame
from ui.resource_tabs import ResourceFrame
from ui.settings_tabs import SettingsTabs

APP_TITLE = "Service Station Admin Console"
CONFIG_FILE = str(get_data_dir() / CONFIG_FILENAME)

logger = logging.getLogger(__name__)


def build_frames(notebook: ttk.Notebook, config: ConfigJSON):
    """リソースごとに controller / 画面を組み立てる。"""
    frames = []
    for spec in ALL_RESOURCES:
        list_ctl = connect(spec, config.api_base_url, config.request_timeout)
        session = EditSession(list_ctl)
        cls = UtilityExpenseFrame if spec is UTILITY_EXPENSES else ResourceFrame
        frame = cls(notebook, list_ctl, session, config)
        notebook.add(frame, text=spec.title)
        frames.append(frame)
    return frames


def main():
    root = tk.Tk()
    root.title(APP_TITLE)
    root.geometry("1280x860")

    try:
        config = ConfigJSON(CONFIG_FILE)
    except Exception as e:
        messagebox.showerror("Startup error", f"Could not load the settings file.\n\n{e}")
        return

    configure_logging(config.get_setting("log_level", "INFO"), config.get_setting("log_file", ""))
    logger.info("starting, API %s", config.api_base_url)

    style = ttk.Style(root)
    apply_theme(style, config.get_setting("theme", ""))

    notebook = ttk.Notebook(root)
    notebook.pack(fill="both", expand=True)

    frames = build_frames(notebook, config)
    apis = [f.list.client.api for f in frames]

    def refresh_all():
        for f in frames:
            f.refresh()

    def on_settings_changed():
        for api in apis:
            api.configure(config.api_base_url, config.request_timeout)
        configure_logging(config.get_setting("log_level", "INFO"), config.get_setting("log_file", ""))
        logger.info("settings changed, API %s", config.api_base_url)
        refresh_all()

    settings = SettingsTabs(
        notebook,
        config,
        style=style,
        on_settings_changed=on_settings_changed,
    )
    notebook.add(settings, text="Settings")

    def on_close():
        for api in apis:
            api.close()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    refresh_all()
    root.mainloop()


if __name__ == "__main__":
    main()
