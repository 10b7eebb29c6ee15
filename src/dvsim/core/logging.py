from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, List


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class JsonlLogger:
    """Structured run log, one JSON object per line.

    With no path and ``keep=False`` every call is a no-op. ``keep=True``
    additionally retains the rows in memory.
    """

    def __init__(self, path: str | Path | None = None, keep: bool = False) -> None:
        self._path = Path(path) if path else None
        self._fh = None
        self.rows: List[Dict[str, Any]] = []
        self._keep = keep
        if self._path:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self._path.open("w", encoding="utf-8")

    def __enter__(self) -> "JsonlLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def log(self, event: str, **kwargs: Any) -> None:
        if not self._fh and not self._keep:
            return
        row = {"event": event, **kwargs}
        if self._keep:
            self.rows.append(row)
        if self._fh:
            self._fh.write(json.dumps(row, sort_keys=True, default=_jsonable) + "\n")
            self._fh.flush()

    def close(self) -> None:
        if self._fh:
            self._fh.close()
            self._fh = None
