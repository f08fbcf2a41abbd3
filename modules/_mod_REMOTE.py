# /modules/_mod_REMOTE.py
from __future__ import annotations

__VERSION__ = "0.2.0"

import threading
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from ._mod_base import (
    ModuleInfo, SyncResult, SyncStatus, TransportError, Logger as HostLogger,
)

from _logging import log as default_root_log
from _notify import Notifier
from _quotes import Quote, QuoteCollection

DEFAULT_URL = "https://jsonplaceholder.typicode.com/posts"
DEFAULT_FETCH_LIMIT = 5
DEFAULT_CATEGORY = "Server"

UA = f"Quote-Sync/{__VERSION__}"


def _headers() -> Dict[str, str]:
    return {
        "User-Agent": UA,
        "Accept": "application/json",
        "Content-Type": "application/json; charset=UTF-8",
    }


# HTTP helpers; every failure surfaces as TransportError

def _http_get_json(session: Any, url: str, timeout: float) -> Any:
    try:
        r = session.get(url, headers=_headers(), timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"GET {url} failed: {e}") from e
    if not r.ok:
        raise TransportError(f"GET {url} → HTTP {r.status_code}: {(r.text or '')[:300]}")
    try:
        return r.json()
    except ValueError as e:
        raise TransportError(f"GET {url} returned invalid JSON: {e}") from e


def _http_post_json(session: Any, url: str, payload: Any, timeout: float) -> int:
    try:
        r = session.post(url, headers=_headers(), json=payload, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"POST {url} failed: {e}") from e
    if not (200 <= r.status_code < 300):
        raise TransportError(f"POST {url} → HTTP {r.status_code}: {(r.text or '')[:300]}")
    return r.status_code


def quotes_from_remote(items: Any, limit: int = DEFAULT_FETCH_LIMIT, category: str = DEFAULT_CATEGORY) -> List[Quote]:
    """Map the first `limit` remote items to quotes: title -> text, fixed category."""
    if not isinstance(items, list):
        return []
    out: List[Quote] = []
    for it in items[: max(0, int(limit))]:
        if not isinstance(it, dict):
            continue
        title = it.get("title")
        if isinstance(title, str) and title.strip():
            out.append(Quote(title.strip(), category))
    return out


def merge(remote: Sequence[Quote], local: Sequence[Quote]) -> List[Quote]:
    """Remote quotes whose exact (text, category) pair is not held locally, in remote order."""
    seen = {(q.text, q.category) for q in local}
    out: List[Quote] = []
    for q in remote:
        k = (q.text, q.category)
        if k in seen:
            continue
        seen.add(k)
        out.append(q)
    return out


class RemoteSyncModule:
    info = ModuleInfo(
        name="REMOTE",
        version=__VERSION__,
        description="Pushes local quotes to a REST endpoint and merges new remote ones.",
    )

    def __init__(
        self,
        config: Mapping[str, Any],
        collection: QuoteCollection,
        notifier: Optional[Notifier] = None,
        logger: Optional[HostLogger] = None,
        session: Any = None,
    ) -> None:
        self.collection = collection
        self.notifier = notifier
        self.session = session or requests.Session()
        self._log = (logger or default_root_log).child(self.info.name)
        self._inflight = threading.Lock()
        self._last_status: Dict[str, Any] = {}
        self.reconfigure(config)

    # config lifecycle
    def reconfigure(self, config: Mapping[str, Any]) -> None:
        remote = dict((config or {}).get("remote") or {})
        sync = dict((config or {}).get("sync") or {})
        limit = remote.get("fetch_limit")
        timeout = remote.get("timeout_sec")
        # all conversions happen before any assignment
        url = (remote.get("url") or DEFAULT_URL).strip()
        fetch_limit = DEFAULT_FETCH_LIMIT if limit is None else int(limit)
        category = (remote.get("category") or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY
        timeout = 15.0 if timeout is None else float(timeout)
        self.url, self.fetch_limit, self.category, self.timeout = url, fetch_limit, category, timeout
        self.push_enabled = bool(sync.get("push_enabled", True))

    def set_logger(self, logger: HostLogger) -> None:
        self._log = logger.child(self.info.name)

    def get_status(self) -> Mapping[str, Any]:
        st = dict(self._last_status)
        st["running"] = self.is_running()
        return st

    def is_running(self) -> bool:
        return self._inflight.locked()

    def _notify(self, message: str, kind: str = "info") -> None:
        if self.notifier is not None:
            self.notifier.notify(message, kind)

    # reads
    def fetch_remote(self) -> List[Quote]:
        try:
            js = _http_get_json(self.session, self.url, self.timeout)
        except TransportError as e:
            self._log(f"fetch failed: {e}", level="WARN")
            return []
        if not isinstance(js, list):
            self._log(f"fetch returned {type(js).__name__}, expected a list", level="WARN")
            return []
        quotes = quotes_from_remote(js, self.fetch_limit, self.category)
        self._log(f"fetched {len(quotes)} remote quotes", level="DEBUG")
        return quotes

    # writes
    def apply_merge(self, new_records: Sequence[Quote]) -> int:
        if not new_records:
            return 0
        n = len(self.collection.merge_in(new_records, merge))
        if n:
            self._notify(f"{n} new quote(s) merged from server.", "info")
        return n

    def push_local(self) -> bool:
        payload = self.collection.to_list()
        try:
            code = _http_post_json(self.session, self.url, payload, self.timeout)
        except TransportError as e:
            self._log(f"push failed: {e}", level="WARN")
            self._notify("Failed to push quotes to server.", "error")
            return False
        self._log(f"pushed {len(payload)} quotes (HTTP {code})", level="DEBUG")
        self._notify("Local quotes pushed to server.", "success")
        return True

    # one cycle: push, then fetch -> merge -> apply
    def tick(self) -> SyncResult:
        t0 = time.time()
        if not self._inflight.acquire(blocking=False):
            self._log("tick skipped; previous sync still running", level="DEBUG")
            return self._finish(t0, SyncStatus.SKIPPED)
        try:
            pushed: Optional[bool] = None
            if self.push_enabled:
                pushed = self.push_local()
            remote = self.fetch_remote()
            added = self.apply_merge(remote)
            warnings = [] if pushed in (None, True) else ["push failed"]
            status = SyncStatus.SUCCESS if not warnings else SyncStatus.WARNING
            res = self._finish(t0, status, items_fetched=len(remote), items_added=added, pushed=pushed, warnings=warnings)
            self._log(f"sync done: fetched={len(remote)} added={added} pushed={pushed}", level="INFO")
        except Exception as e:
            self._log(f"unexpected error: {e!r}", level="ERROR")
            res = self._finish(t0, SyncStatus.FAILED, errors=[repr(e)])
        finally:
            self._inflight.release()
        self._last_status = {
            "last_run": res.finished_at,
            "status": res.status.name,
            "items_added": res.items_added,
            "pushed": res.pushed,
            "errors": list(res.errors),
        }
        return res

    def _finish(
        self,
        t0: float,
        status: SyncStatus,
        *,
        items_fetched: int = 0,
        items_added: int = 0,
        pushed: Optional[bool] = None,
        warnings: Optional[List[str]] = None,
        errors: Optional[List[str]] = None,
    ) -> SyncResult:
        t1 = time.time()
        return SyncResult(
            status=status,
            started_at=t0,
            finished_at=t1,
            duration_ms=int((t1 - t0) * 1000),
            items_fetched=items_fetched,
            items_added=items_added,
            pushed=pushed,
            warnings=list(warnings or []),
            errors=list(errors or []),
        )
