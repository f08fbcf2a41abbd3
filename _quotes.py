# _quotes.py
# Quote records and the collection that owns them.

from __future__ import annotations
import json
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from _logging import log as default_log
from _store import FILTER_KEY, QUOTES_KEY, LocalStore
from modules._mod_base import DecodeError, FormatError, ValidationError


@dataclass(frozen=True)
class Quote:
    text: str
    category: str

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "category": self.category}


DEFAULT_QUOTES: List[Quote] = [
    Quote("Success is not final; failure is not fatal.", "Motivation"),
    Quote("Be yourself; everyone else is already taken.", "Inspiration"),
    Quote("Life is what happens when you're busy making other plans.", "Life"),
]


def quote_from_mapping(d: Any) -> Optional[Quote]:
    """Best-effort: a Quote from {text, category} with both non-empty after trimming, else None."""
    if isinstance(d, Quote):
        return d
    if not isinstance(d, Mapping):
        return None
    text, cat = d.get("text"), d.get("category")
    if not isinstance(text, str) or not isinstance(cat, str):
        return None
    text, cat = text.strip(), cat.strip()
    if not text or not cat:
        return None
    return Quote(text, cat)


def _is_sequence(obj: Any) -> bool:
    return isinstance(obj, (list, tuple))


class QuoteCollection:
    """
    Ordered quote list backed by the local store.

    Every mutation runs read -> mutate -> persist under one lock.
    """

    def __init__(self, store: LocalStore, logger=None) -> None:
        self.store = store
        self._log = (logger or default_log).child("QUOTES")
        self._lock = threading.RLock()
        self._items: List[Quote] = []
        self._subscribers: List[Callable[[List[Quote]], None]] = []

    # ---- lifecycle ----
    def load(self) -> List[Quote]:
        with self._lock:
            try:
                raw = self.store.get_json(QUOTES_KEY)
            except DecodeError as e:
                self._log.warn(f"{e}; falling back to defaults")
                raw = None
            items = [q for q in (quote_from_mapping(r) for r in raw) if q] if _is_sequence(raw) else []
            if not items:
                items = list(DEFAULT_QUOTES)
                self._items = items
                self._persist()
                self._log.debug(f"seeded {len(items)} default quotes")
            else:
                self._items = items
            self._log.debug(f"loaded {len(self._items)} quotes")
            return list(self._items)

    # ---- store object: get / set / subscribe ----
    def get(self) -> List[Quote]:
        with self._lock:
            return list(self._items)

    def set(self, records: Iterable[Any]) -> None:
        with self._lock:
            self._items = [q for q in (quote_from_mapping(r) for r in records) if q]
            self._commit()

    def subscribe(self, callback: Callable[[List[Quote]], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)
        return unsubscribe

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    # ---- mutations ----
    def add(self, text: Any, category: Any) -> Quote:
        text = text.strip() if isinstance(text, str) else ""
        category = category.strip() if isinstance(category, str) else ""
        if not text or not category:
            raise ValidationError("Please enter both quote and category.")
        q = Quote(text, category)
        with self._lock:
            self._items.append(q)
            self._commit()
        self._log.debug(f"added quote in {category!r}")
        return q

    def import_batch(self, records: Any) -> List[Quote]:
        if not _is_sequence(records):
            raise FormatError("Invalid file format: expected a JSON array of quotes.")
        added = [q for q in (quote_from_mapping(r) for r in records) if q]
        skipped = len(records) - len(added)
        with self._lock:
            self._items.extend(added)
            self._commit()
        self._log.info(f"imported {len(added)} quotes" + (f" (skipped {skipped} malformed)" if skipped else ""))
        return added

    def import_json(self, text: str) -> List[Quote]:
        try:
            payload = json.loads(text)
        except (TypeError, ValueError) as e:
            raise FormatError(f"Invalid JSON: {e}") from e
        return self.import_batch(payload)

    def merge_in(self, records: Iterable[Any], merge_fn: Callable[[List[Quote], List[Quote]], List[Quote]]) -> List[Quote]:
        """Append merge_fn(records, current) under the lock, so no writer slips in between."""
        incoming = [q for q in (quote_from_mapping(r) for r in records) if q]
        with self._lock:
            new = merge_fn(incoming, list(self._items))
            if new:
                self._items.extend(new)
                self._commit()
        return new

    # ---- reads ----
    def categories(self) -> List[str]:
        """Distinct categories in first-seen order; case variants fold onto the first spelling."""
        seen: Dict[str, str] = {}
        for q in self.get():
            seen.setdefault(q.category.lower(), q.category)
        return list(seen.values())

    def to_list(self) -> List[Dict[str, str]]:
        return [q.to_dict() for q in self.get()]

    def export_json(self) -> str:
        return json.dumps(self.to_list(), indent=2, ensure_ascii=False)

    # ---- selected category slot ----
    def load_filter(self) -> str:
        try:
            v = self.store.get_json(FILTER_KEY, "all")
        except DecodeError as e:
            self._log.warn(f"{e}; filter reset to 'all'")
            return "all"
        return v if isinstance(v, str) and v else "all"

    def save_filter(self, category: str) -> None:
        self.store.set_json(FILTER_KEY, category or "all")

    # ---- internals ----
    def _persist(self) -> None:
        self.store.set_json(QUOTES_KEY, [q.to_dict() for q in self._items])

    def _commit(self) -> None:
        self._persist()
        snapshot = list(self._items)
        for cb in list(self._subscribers):
            try:
                cb(snapshot)
            except Exception as e:
                self._log.error(f"subscriber failed: {e!r}")
