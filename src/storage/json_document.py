"""Atomic JSON document persistence shared by the article and ad stores."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable


class StorageError(RuntimeError):
    """Raised when a persisted document cannot be read or written."""


class JsonDocument:
    """
    A single JSON file holding one top-level value.

    Writes go through a temporary file in the same directory followed by
    ``os.replace``, so readers see either the previous or the new document.
    ``lock`` serializes read-modify-write cycles within the process.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.lock = threading.RLock()

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self, default: Callable[[], Any] = list) -> Any:
        """Return the parsed document, or ``default()`` when the file is absent."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return default()
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not raw.strip():
            return default()
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"{self.path} is not valid JSON: {exc}") from exc

    def write(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
