#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
_scheduling.py

Background sync timer driven by config callbacks, not file paths.
Fires run_sync_fn every sync.interval_sec seconds; a tick that comes due
while the previous sync is still in flight is skipped, never queued.
"""

from __future__ import annotations
import threading
import time
from typing import Any, Callable, Dict, Optional

from _logging import log

DEFAULT_SYNC = {
    "enabled": True,
    "interval_sec": 15,
}

MIN_INTERVAL_SEC = 1.0


def merge_defaults(s: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(DEFAULT_SYNC)
    if isinstance(s, dict):
        out.update({k: v for k, v in s.items() if v is not None})
    return out


def interval_of(sch: Dict[str, Any]) -> float:
    try:
        n = float(sch.get("interval_sec") or DEFAULT_SYNC["interval_sec"])
    except (TypeError, ValueError):
        n = float(DEFAULT_SYNC["interval_sec"])
    return max(MIN_INTERVAL_SEC, n)


class SyncScheduler:
    def __init__(
        self,
        load_config: Callable[[], Dict[str, Any]],
        run_sync_fn: Callable[[], bool],
        is_sync_running_fn: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.load_config_cb = load_config
        self.run_sync_fn = run_sync_fn
        self.is_sync_running_fn = is_sync_running_fn or (lambda: False)
        self._log = log.child("SCHED")

        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._lock = threading.Lock()
        self._status: Dict[str, Any] = {
            "running": False,
            "last_tick": 0,
            "last_run_ok": None,
            "last_run_at": 0,
            "next_run_at": 0,
            "skipped": 0,
        }

    # ---- config helpers ----
    def _get_sync_cfg(self) -> Dict[str, Any]:
        cfg = self.load_config_cb() or {}
        return merge_defaults(cfg.get("sync") or {})

    def status(self) -> Dict[str, Any]:
        with self._lock:
            st = dict(self._status)
        st["config"] = self._get_sync_cfg()
        return st

    # ---- control ----
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="SyncScheduler", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._wake.set()
        t = self._thread
        if t and t.is_alive():
            t.join(timeout=2.0)

    def refresh(self) -> None:
        # re-read config and recompute the next slot
        self._wake.set()
        if not self._thread or not self._thread.is_alive():
            self.start()

    def run_once(self) -> bool:
        """One guarded tick; returns False when skipped or failed."""
        if self.is_sync_running_fn():
            with self._lock:
                self._status["skipped"] += 1
            self._log.debug("tick skipped; sync already running")
            return False
        ok = False
        try:
            ok = bool(self.run_sync_fn())
        except Exception as e:
            self._log.error(f"sync raised: {e!r}")
        finally:
            with self._lock:
                self._status["last_run_ok"] = ok
                self._status["last_run_at"] = int(time.time())
        return ok

    # ---- internals ----
    def _loop(self) -> None:
        with self._lock:
            self._status["running"] = True
        try:
            while not self._stop.is_set():
                sch = self._get_sync_cfg()
                interval = interval_of(sch)
                nxt = time.time() + interval
                with self._lock:
                    self._status["last_tick"] = int(time.time())
                    self._status["next_run_at"] = int(nxt)

                self._wake.wait(timeout=interval)
                if self._wake.is_set():
                    self._wake.clear()
                    continue
                if self._stop.is_set():
                    break
                if sch.get("enabled"):
                    self.run_once()
        finally:
            with self._lock:
                self._status["running"] = False
