"""Run-output storage for dispatch optimizations."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


class FileStorage:
    """Per-run folders under ``<data_root>/outputs`` holding a dispatch summary and route sheet.

    Folder names are ``<prefix>[_<label>]_<utc timestamp>``, so reruns for the
    same provider and day sit side by side and never overwrite each other.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "dispatch", label: str | None = None) -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        parts = [prefix]
        if label:
            parts.append(_UNSAFE.sub("-", label))
        parts.append(timestamp)
        path = self.output_root / "_".join(parts)
        path.mkdir(parents=True, exist_ok=False)
        return path

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        # datetimes and dates in run metadata fall back to str()
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=indent, default=str)

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def save_run(self, label: str, summary: dict, routes_csv: str) -> Path:
        """Write ``summary.json`` and ``routes.csv`` for one optimization run."""

        run_dir = self.make_run_directory(label=label)
        self.write_json(run_dir / "summary.json", summary)
        self.write_csv(run_dir / "routes.csv", routes_csv)
        return run_dir
