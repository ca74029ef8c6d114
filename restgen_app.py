#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
restgen_app.py

Small desktop front-end for the REST slice generator: pick a Java/Kotlin
class file, press Generate, read the outcome in a dialog.

Run:
  python3 restgen_app.py
"""
from __future__ import annotations

import queue
import threading
from typing import Any, Tuple

import tkinter as tk
from tkinter import ttk, filedialog, messagebox

from restgen import Message, RestGenConfig, RestGenError, RestGenHub
from restgen.hub import PROJECT_DEFAULT, TYPE_CHECKS, form_config
from restgen.models import LogFn
from restgen.project import OVERWRITE_POLICIES


APP_TITLE = "REST Generator"


def strip_quotes(s: str) -> str:
    return (s or "").strip().strip('"').strip("'")


def show_message(msg: Message) -> None:
    if msg.level == "error":
        messagebox.showerror(msg.title, msg.text)
    elif msg.level == "warn":
        messagebox.showwarning(msg.title, msg.text)
    else:
        messagebox.showinfo(msg.title, msg.text)


def generation_job(hub: RestGenHub, config: RestGenConfig, on_line: LogFn) -> Message:
    """Run one generation and return the message for the result dialog."""
    try:
        return hub.run(config, on_line=on_line).message
    except RestGenError as e:
        on_line(f"[ERROR] {e}")
        return Message("error", "Generation failed", str(e))
    except Exception as e:
        on_line(f"[ERROR] {type(e).__name__}: {e}")
        return Message("error", "Unexpected error", f"{type(e).__name__}: {e}")


class App(ttk.Frame):
    def __init__(self, master: tk.Tk):
        super().__init__(master)
        self.master.title(APP_TITLE)
        self.master.geometry("820x520")
        self.master.minsize(640, 420)

        self.q: "queue.Queue[Tuple[str, Any]]" = queue.Queue()
        self.hub = RestGenHub()

        self.source_file = tk.StringVar()
        self.project_root = tk.StringVar()
        self.api_prefix = tk.StringVar()
        self.overwrite_policy = tk.StringVar(value=PROJECT_DEFAULT)
        self.dry_run = tk.BooleanVar(value=False)
        self.type_check = tk.StringVar(value=PROJECT_DEFAULT)

        self._build_ui()
        self._poll_queue()

    # -------------- UI layout --------------

    def _build_ui(self) -> None:
        top = ttk.Frame(self)
        top.pack(fill="x", padx=12, pady=10)

        ttk.Label(top, text="Class file:").grid(row=0, column=0, sticky="w")
        ttk.Entry(top, textvariable=self.source_file).grid(row=0, column=1, sticky="ew", padx=(8, 8))
        ttk.Button(top, text="Browse…", command=self._pick_source).grid(row=0, column=2, sticky="ew")

        ttk.Label(top, text="Project root (optional):").grid(row=1, column=0, sticky="w", pady=(8, 0))
        ttk.Entry(top, textvariable=self.project_root).grid(row=1, column=1, sticky="ew", padx=(8, 8), pady=(8, 0))
        ttk.Button(top, text="Browse…", command=self._pick_root).grid(row=1, column=2, sticky="ew", pady=(8, 0))
        top.columnconfigure(1, weight=1)

        opt = ttk.LabelFrame(self, text="Options")
        opt.pack(fill="x", padx=12, pady=6)
        ttk.Label(opt, text="API prefix (blank: project):").grid(row=0, column=0, sticky="w", padx=6, pady=4)
        ttk.Entry(opt, textvariable=self.api_prefix, width=16).grid(row=0, column=1, sticky="w")
        ttk.Label(opt, text="Existing files:").grid(row=0, column=2, sticky="w", padx=(16, 6))
        ttk.Combobox(opt, textvariable=self.overwrite_policy, values=[PROJECT_DEFAULT, *OVERWRITE_POLICIES],
                     state="readonly", width=16).grid(row=0, column=3, sticky="w")
        ttk.Checkbutton(opt, text="Dry run", variable=self.dry_run).grid(row=1, column=0, sticky="w", padx=6, pady=4)
        ttk.Label(opt, text="Undeclared field types:").grid(row=1, column=2, sticky="w", padx=(16, 6))
        ttk.Combobox(opt, textvariable=self.type_check, values=[PROJECT_DEFAULT, *TYPE_CHECKS],
                     state="readonly", width=16).grid(row=1, column=3, sticky="w")

        ttk.Button(self, text="Generate", command=self._generate).pack(anchor="e", padx=12, pady=(0, 6))

        bottom = ttk.Frame(self)
        bottom.pack(fill="both", expand=True, padx=12, pady=(0, 12))
        ttk.Label(bottom, text="Log:").pack(anchor="w")
        self.log = tk.Text(bottom, height=12, wrap="none")
        self.log.pack(fill="both", expand=True)
        self.log.configure(state="disabled")

    # -------------- helpers --------------

    def _log(self, line: str) -> None:
        self.q.put(("log", line))

    def _poll_queue(self) -> None:
        try:
            while True:
                kind, payload = self.q.get_nowait()
                if kind == "log":
                    self.log.configure(state="normal")
                    self.log.insert("end", payload + "\n")
                    self.log.see("end")
                    self.log.configure(state="disabled")
                elif kind == "dialog":
                    show_message(payload)
        except queue.Empty:
            pass
        self.after(90, self._poll_queue)

    # -------------- pickers --------------

    def _pick_source(self) -> None:
        f = filedialog.askopenfilename(
            title="Select class file",
            filetypes=[("Java/Kotlin", "*.java *.kt"), ("All files", "*.*")],
        )
        if f:
            self.source_file.set(f)

    def _pick_root(self) -> None:
        d = filedialog.askdirectory(title="Select project root")
        if d:
            self.project_root.set(d)

    # -------------- actions --------------

    def _config(self) -> RestGenConfig:
        return form_config(
            strip_quotes(self.source_file.get()),
            project_root=strip_quotes(self.project_root.get()),
            api_prefix=self.api_prefix.get(),
            overwrite_policy=self.overwrite_policy.get(),
            type_check=self.type_check.get(),
            dry_run=self.dry_run.get(),
        )

    def _generate(self) -> None:
        config = self._config()

        def work():
            self.q.put(("dialog", generation_job(self.hub, config, self._log)))

        threading.Thread(target=work, daemon=True).start()


def main() -> int:
    root = tk.Tk()
    app = App(root)
    app.pack(fill="both", expand=True)
    root.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
