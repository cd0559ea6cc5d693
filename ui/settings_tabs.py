# ui/settings_tabs.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox, filedialog

from config import ENV_API_URL, LOG_LEVELS, ConfigJSON


class SettingsTabs(ttk.Frame):
    def __init__(self, parent, config: ConfigJSON, *, style: ttk.Style, on_settings_changed=None):
        super().__init__(parent)
        self.config = config
        self.style = style
        self.on_settings_changed = on_settings_changed

        outer = ttk.Frame(self)
        outer.pack(fill="both", expand=True, padx=10, pady=10)

        # ---- Server ----
        lf = ttk.LabelFrame(outer, text="Server")
        lf.pack(fill="x", padx=6, pady=6)

        ttk.Label(lf, text="API base URL").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        self.var_url = tk.StringVar()
        ttk.Entry(lf, textvariable=self.var_url, width=50).grid(row=0, column=1, sticky="w", padx=4, pady=4)

        ttk.Label(lf, text="Timeout (sec)").grid(row=1, column=0, sticky="w", padx=4, pady=4)
        self.var_timeout = tk.StringVar()
        ttk.Spinbox(lf, from_=1, to=120, textvariable=self.var_timeout, width=6).grid(row=1, column=1, sticky="w", padx=4, pady=4)

        ttk.Button(lf, text="Save", command=self.save_server).grid(row=1, column=2, sticky="w", padx=6, pady=4)

        self.var_env_note = tk.StringVar()
        ttk.Label(lf, textvariable=self.var_env_note, foreground="gray").grid(row=2, column=0, columnspan=3, sticky="w", padx=4, pady=2)

        # ---- Appearance ----
        lf2 = ttk.LabelFrame(outer, text="Appearance")
        lf2.pack(fill="x", padx=6, pady=6)

        ttk.Label(lf2, text="Theme").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        self.var_theme = tk.StringVar()
        ttk.Combobox(lf2, textvariable=self.var_theme, values=list(self.style.theme_names()),
                     state="readonly", width=30).grid(row=0, column=1, sticky="w", padx=4, pady=4)
        ttk.Button(lf2, text="Apply", command=self.apply_theme).grid(row=0, column=2, sticky="w", padx=6, pady=4)

        # ---- Reports / logs ----
        lf3 = ttk.LabelFrame(outer, text="Reports / Logs")
        lf3.pack(fill="x", padx=6, pady=6)

        ttk.Label(lf3, text="Report folder").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        self.var_report_dir = tk.StringVar()
        ttk.Entry(lf3, textvariable=self.var_report_dir, width=60).grid(row=0, column=1, sticky="w", padx=4, pady=4)
        ttk.Button(lf3, text="Browse...", command=self.browse_report_dir).grid(row=0, column=2, sticky="w", padx=6, pady=4)

        ttk.Label(lf3, text="Log level").grid(row=1, column=0, sticky="w", padx=4, pady=4)
        self.var_log_level = tk.StringVar()
        ttk.Combobox(lf3, textvariable=self.var_log_level, values=list(LOG_LEVELS),
                     state="readonly", width=12).grid(row=1, column=1, sticky="w", padx=4, pady=4)

        ttk.Label(lf3, text="Log file (blank = console only)").grid(row=2, column=0, sticky="w", padx=4, pady=4)
        self.var_log_file = tk.StringVar()
        ttk.Entry(lf3, textvariable=self.var_log_file, width=60).grid(row=2, column=1, sticky="w", padx=4, pady=4)

        ttk.Button(lf3, text="Save", command=self.save_output).grid(row=3, column=0, sticky="w", padx=4, pady=6)

        # ---- Data ----
        lf4 = ttk.LabelFrame(outer, text="Data")
        lf4.pack(fill="x", padx=6, pady=6)

        ttk.Label(lf4, text="Settings file").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        path_var = tk.StringVar(value=self.config.path)
        ttk.Entry(lf4, width=80, state="readonly", textvariable=path_var).grid(row=0, column=1, sticky="w", padx=4, pady=4)
        ttk.Button(lf4, text="Reset settings", command=self.reset_settings).grid(row=1, column=0, sticky="w", padx=4, pady=6)

        self._load_vars()

    def _load_vars(self):
        c = self.config
        self.var_url.set(c.get_setting("api_base_url", ""))
        self.var_timeout.set(str(c.get_setting("request_timeout", 10)))
        self.var_theme.set(c.get_setting("theme", ""))
        self.var_report_dir.set(c.get_setting("report_dir", ""))
        self.var_log_level.set(c.get_setting("log_level", "INFO"))
        self.var_log_file.set(c.get_setting("log_file", ""))
        if c.api_base_url != c.get_setting("api_base_url", ""):
            self.var_env_note.set(f"{ENV_API_URL} is set: using {c.api_base_url}")
        else:
            self.var_env_note.set("")

    def _notify_changed(self):
        if callable(self.on_settings_changed):
            self.on_settings_changed()

    def save_server(self):
        url = (self.var_url.get() or "").strip()
        if not url.startswith(("http://", "https://")):
            messagebox.showwarning("Input", "API base URL must start with http:// or https://", parent=self)
            return
        self.config.set_setting("api_base_url", url.rstrip("/"))
        self.config.set_setting("request_timeout", self.var_timeout.get())
        self._load_vars()
        self._notify_changed()

    def apply_theme(self):
        theme = self.var_theme.get()
        if theme and theme in self.style.theme_names():
            try:
                self.style.theme_use(theme)
                self.config.set_setting("theme", theme)
            except (tk.TclError, OSError) as e:
                messagebox.showerror("Error", str(e), parent=self)

    def browse_report_dir(self):
        d = filedialog.askdirectory(parent=self, initialdir=self.config.report_dir)
        if d:
            self.var_report_dir.set(d)

    def save_output(self):
        try:
            self.config.set_setting("report_dir", (self.var_report_dir.get() or "").strip())
            self.config.set_setting("log_level", self.var_log_level.get())
            self.config.set_setting("log_file", (self.var_log_file.get() or "").strip())
        except OSError as e:
            messagebox.showerror("Error", str(e), parent=self)
            return
        self._load_vars()
        self._notify_changed()
        messagebox.showinfo("Saved", "Settings saved", parent=self)

    def reset_settings(self):
        if not messagebox.askyesno("Confirm", "Reset all settings to their defaults?", parent=self):
            return
        self.config.reset_settings()
        self._load_vars()
        self._notify_changed()
