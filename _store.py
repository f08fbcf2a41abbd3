# _store.py
"""
Key-value slots for quote state.

LocalStore   durable; one JSON file mapping slot name -> JSON-encoded string.
SessionCache ephemeral; in process memory, scoped per session id.

Both keep the browser-storage shape (string keys, string values) so the
persisted file stays readable and slots can be added without a schema.
"""

from __future__ import annotations
import json
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Optional

from _logging import log
from modules._mod_base import DecodeError

QUOTES_KEY = "quotes"
FILTER_KEY = "selectedCategory"
LAST_QUOTE_KEY = "lastViewedQuote"

MAX_SESSIONS = 1000

_MISSING = object()


def _read_json(p: Path) -> Dict[str, Any]:
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        log.child("STORE").warn(f"local storage {p} unreadable ({e}); starting empty")
        return {}
    return data if isinstance(data, dict) else {}


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    tmp.replace(p)


class LocalStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.lock = threading.RLock()

    def get_item(self, key: str) -> Optional[str]:
        with self.lock:
            v = _read_json(self.path).get(key)
        return v if isinstance(v, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self.lock:
            data = _read_json(self.path)
            data[key] = value
            _write_json_atomic(self.path, data)

    def remove_item(self, key: str) -> None:
        with self.lock:
            data = _read_json(self.path)
            if data.pop(key, None) is not None:
                _write_json_atomic(self.path, data)

    def clear(self) -> None:
        with self.lock:
            if self.path.exists():
                self.path.unlink()

    # JSON helpers
    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a slot; raises DecodeError when the stored string is not valid JSON."""
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise DecodeError(f"slot {key!r} holds corrupt JSON: {e}") from e

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False))


class SessionCache:
    """Per-session slots; gone when the process ends.

    Holds at most max_sessions ids; the least recently used one is dropped first.
    """

    def __init__(self, max_sessions: int = MAX_SESSIONS) -> None:
        self.max_sessions = max(1, int(max_sessions))
        self._lock = threading.Lock()
        self._data: "OrderedDict[str, Dict[str, str]]" = OrderedDict()

    def get_json(self, session_id: str, key: str, default: Any = None) -> Any:
        with self._lock:
            slots = self._data.get(session_id)
            if slots is None:
                return default
            self._data.move_to_end(session_id)
            raw = slots.get(key, _MISSING)
        if raw is _MISSING:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return default

    def set_json(self, session_id: str, key: str, value: Any) -> None:
        with self._lock:
            self._data.setdefault(session_id, {})[key] = json.dumps(value, ensure_ascii=False)
            self._data.move_to_end(session_id)
            while len(self._data) > self.max_sessions:
                self._data.popitem(last=False)

    def end_session(self, session_id: str) -> None:
        with self._lock:
            self._data.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
