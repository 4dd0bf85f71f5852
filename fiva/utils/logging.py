# fiva/utils/logging.py
from __future__ import annotations
import os, csv, json, time
from typing import Any, Dict, Optional


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


class CSVLogger:
    """One row per finished game: game index, winner, steps, FIVAs per team."""

    def __init__(self, path: str, fieldnames=("game", "winner", "steps", "fivas", "truncated")):
        self.path = path
        _ensure_parent(self.path)
        self._fh = open(self.path, "a", newline="", encoding="utf-8")
        self._w = csv.DictWriter(self._fh, fieldnames=list(fieldnames), extrasaction="ignore")
        if self._fh.tell() == 0:
            self._w.writeheader()

    def log(self, row: Dict[str, Any]) -> None:
        self._w.writerow(row)
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class JSONLLogger:
    def __init__(self, path: str):
        self.path = path
        _ensure_parent(self.path)
        self._fh = open(self.path, "a", encoding="utf-8")

    def log(self, step: int, payload: Dict[str, Any]) -> None:
        out = {"step": int(step), "ts": int(time.time()), **payload}
        self._fh.write(json.dumps(out, ensure_ascii=False) + "\n")
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self) -> "JSONLLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def read_jsonl(path: str, limit: Optional[int] = None):
    """Load a JSONL game log back into a list of dicts."""
    rows = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            rows.append(json.loads(line))
            if limit is not None and len(rows) >= limit:
                break
    return rows
