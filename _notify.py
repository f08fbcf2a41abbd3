# _notify.py
from __future__ import annotations
import itertools
import threading
import time
from typing import Any, Callable, Dict, List

from _logging import log as default_log

DEFAULT_TTL_SEC = 4.0
MAX_NOTICES = 50


class Notifier:
    """Transient user-facing notices; each one expires ttl_sec after it was raised."""

    def __init__(self, ttl_sec: float = DEFAULT_TTL_SEC, logger=None, clock: Callable[[], float] = time.time) -> None:
        self.ttl_sec = float(ttl_sec)
        self._log = (logger or default_log).child("NOTIFY")
        self._clock = clock
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._items: List[Dict[str, Any]] = []

    def notify(self, message: str, kind: str = "info") -> Dict[str, Any]:
        now = self._clock()
        with self._lock:
            notice = {
                "id": next(self._ids),
                "kind": kind,
                "message": message,
                "ts": now,
                "expires_at": now + self.ttl_sec,
            }
            self._items.append(notice)
            if len(self._items) > MAX_NOTICES:
                self._items = self._items[-MAX_NOTICES:]
        if kind == "error":
            self._log.warn(message)
        elif kind == "success":
            self._log.success(message)
        else:
            self._log.info(message)
        return dict(notice)

    def active(self, since_id: int = 0) -> List[Dict[str, Any]]:
        now = self._clock()
        with self._lock:
            self._items = [n for n in self._items if n["expires_at"] > now]
            return [dict(n) for n in self._items if n["id"] > since_id]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

