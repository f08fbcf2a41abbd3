# _selector.py
# Filtering, random pick and the view model for the quote page.

from __future__ import annotations
import random
from typing import Any, Dict, List, Optional, Sequence

from _quotes import Quote, QuoteCollection, quote_from_mapping
from _store import LAST_QUOTE_KEY, SessionCache
from modules._mod_base import EmptySelectionError

ALL = "all"
NO_QUOTES_TEXT = "No quotes available in this category."


# -------- Pure helpers --------
def visible_set(quotes: Sequence[Quote], selected: str) -> List[Quote]:
    """All quotes for "all", otherwise those whose category matches case-insensitively."""
    if selected == ALL:
        return list(quotes)
    want = (selected or "").lower()
    return [q for q in quotes if q.category.lower() == want]


def pick_random(subset: Sequence[Quote], rng: Optional[random.Random] = None) -> Quote:
    if not subset:
        raise EmptySelectionError("no quotes to pick from")
    return (rng or random).choice(list(subset))


def restore_filter(stored: Optional[str], categories: Sequence[str]) -> str:
    """
    A restored filter must name a category that still exists; the stored
    spelling may differ in case, the canonical one from `categories` wins.
    """
    if not stored or stored == ALL:
        return ALL
    want = stored.lower()
    for c in categories:
        if c.lower() == want:
            return c
    return ALL


def format_quote(q: Quote) -> str:
    return f'"{q.text}" — ({q.category})'


def render_view(quotes: Sequence[Quote], selected: str, last_quote: Optional[Quote]) -> Dict[str, Any]:
    """Map (collection, filter, last shown quote) to what the page renders."""
    cats: Dict[str, str] = {}
    for q in quotes:
        cats.setdefault(q.category.lower(), q.category)
    visible = visible_set(quotes, selected)
    shown = last_quote if last_quote is not None and last_quote in visible else None
    if shown is not None:
        text = format_quote(shown)
    elif not visible:
        text = NO_QUOTES_TEXT
    else:
        text = ""
    return {
        "quote": shown.to_dict() if shown else None,
        "quote_text": text,
        "categories": [ALL] + list(cats.values()),
        "selected": selected,
        "count": len(visible),
        "total": len(quotes),
    }


# -------- Controller --------
class QuoteBoard:
    """What the UI dispatches into: filter state, random display and the last-shown memory."""

    def __init__(self, collection: QuoteCollection, session: SessionCache, rng: Optional[random.Random] = None) -> None:
        self.collection = collection
        self.session = session
        self.rng = rng
        self._selected = restore_filter(collection.load_filter(), collection.categories())

    @property
    def selected(self) -> str:
        return self._selected

    def set_filter(self, category: str, session_id: str) -> Optional[Quote]:
        self._selected = restore_filter(category, self.collection.categories())
        self.collection.save_filter(self._selected)
        return self.show_random(session_id)

    def show_random(self, session_id: str) -> Optional[Quote]:
        subset = visible_set(self.collection.get(), self._selected)
        try:
            q = pick_random(subset, self.rng)
        except EmptySelectionError:
            return None
        self.session.set_json(session_id, LAST_QUOTE_KEY, q.to_dict())
        return q

    def last_quote(self, session_id: str) -> Optional[Quote]:
        return quote_from_mapping(self.session.get_json(session_id, LAST_QUOTE_KEY))

    def view(self, session_id: str) -> Dict[str, Any]:
        quotes = self.collection.get()
        last = self.last_quote(session_id)
        if last is None or last not in visible_set(quotes, self._selected):
            last = self.show_random(session_id)
        return render_view(quotes, self._selected, last)
