"""Persistent record of blocked requests, kept as JSON lines."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from os import PathLike
from pathlib import Path
from typing import Iterable, Mapping

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _encode(row: Mapping[str, str]) -> str:
    return json.dumps(row, ensure_ascii=False, sort_keys=True) + "\n"


def _is_row(value: object) -> bool:
    return isinstance(value, dict) and all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    )


class GuardLog:
    """Interception log held in memory and mirrored to a JSON-lines file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        self._entries: list[dict[str, str]] = []
        self._lock = threading.Lock()

    def load(self) -> None:
        """Replace the in-memory entries with those stored in the file.

        Reading stops at the first line that is not a JSON object of
        strings; a missing file leaves the log empty.
        """
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._entries = []
            try:
                fh = open(self.path, encoding="utf-8")
            except OSError:
                return
            with fh:
                for line in fh:
                    if not line.strip():
                        continue
                    try:
                        row = json.loads(line)
                    except ValueError:
                        break
                    if not _is_row(row):
                        break
                    self._entries.append(row)

    def add(
        self, log_type: str, content: str, keyword: str, description: str
    ) -> dict[str, str]:
        """Record one interception and append it to the file."""
        row = {
            "time": datetime.now().strftime(TIME_FORMAT),
            "guard_type": description,
            "type": log_type,
            "content": content,
            "keyword": keyword,
        }
        with self._lock:
            self._entries.append(row)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write(_encode(row))
        return dict(row)

    def entries(self) -> list[dict[str, str]]:
        """A copy of every recorded entry, oldest first."""
        with self._lock:
            return [dict(row) for row in self._entries]

    def delete(self, selected: Iterable[Mapping[str, str]]) -> int:
        """Remove entries whose time and content equal a selected one.

        The file is rewritten with the remaining entries.  Returns the
        number of entries removed.
        """
        keys = {(sel.get("time", ""), sel.get("content", "")) for sel in selected}
        with self._lock:
            kept = [
                row
                for row in self._entries
                if (row.get("time", ""), row.get("content", "")) not in keys
            ]
            removed = len(self._entries) - len(kept)
            self._entries = kept
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                fh.writelines(_encode(row) for row in kept)
        return removed