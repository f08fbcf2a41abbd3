# _runtime.py
# Wires config -> stores -> collection -> board / notifier / sync engine.

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from _config import load_config, storage_path
from _logging import log
from _notify import DEFAULT_TTL_SEC, Notifier
from _quotes import QuoteCollection
from _selector import QuoteBoard
from _store import LocalStore, SessionCache
from modules._mod_REMOTE import RemoteSyncModule


@dataclass
class Runtime:
    cfg: Dict[str, Any]
    store: LocalStore
    session: SessionCache
    collection: QuoteCollection
    board: QuoteBoard
    notifier: Notifier
    engine: RemoteSyncModule

    def reconfigure(self, cfg: Dict[str, Any]) -> None:
        """Apply cfg to the live components; on error nothing has been changed."""
        ttl = _notice_ttl(cfg)
        self.engine.reconfigure(cfg)
        self.notifier.ttl_sec = ttl
        self.cfg = cfg
        apply_runtime_flags(cfg)


def _notice_ttl(cfg: Dict[str, Any]) -> float:
    v = (cfg.get("ui") or {}).get("notification_ttl_sec")
    return DEFAULT_TTL_SEC if v is None else float(v)


def apply_runtime_flags(cfg: Dict[str, Any]) -> None:
    log.set_level("debug" if (cfg.get("runtime") or {}).get("debug") else "info")


def build_runtime(cfg: Optional[Dict[str, Any]] = None, http_session: Any = None) -> Runtime:
    cfg = cfg if cfg is not None else load_config()
    apply_runtime_flags(cfg)
    store = LocalStore(storage_path(cfg))
    collection = QuoteCollection(store)
    collection.load()
    session = SessionCache()
    notifier = Notifier(ttl_sec=_notice_ttl(cfg))
    engine = RemoteSyncModule(cfg, collection, notifier=notifier, session=http_session)
    board = QuoteBoard(collection, session)
    return Runtime(cfg, store, session, collection, board, notifier, engine)
