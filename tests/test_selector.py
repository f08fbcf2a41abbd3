import random

import pytest

from _quotes import DEFAULT_QUOTES, Quote, QuoteCollection
from _selector import (
    NO_QUOTES_TEXT,
    QuoteBoard,
    format_quote,
    pick_random,
    render_view,
    restore_filter,
    visible_set,
)
from _store import LAST_QUOTE_KEY, SessionCache
from modules._mod_base import EmptySelectionError

QUOTES = [
    Quote("a", "Life"),
    Quote("b", "work"),
    Quote("c", "LIFE"),
    Quote("d", "Art"),
]


def test_visible_set_all_returns_everything() -> None:
    assert visible_set(QUOTES, "all") == QUOTES
    assert visible_set([], "all") == []


@pytest.mark.parametrize("selected", ["life", "Life", "LIFE", "lIfE"])
def test_visible_set_matches_category_case_insensitively(selected: str) -> None:
    assert visible_set(QUOTES, selected) == [Quote("a", "Life"), Quote("c", "LIFE")]


def test_visible_set_no_match_is_empty_not_error() -> None:
    assert visible_set(QUOTES, "Nope") == []


def test_pick_random_returns_member() -> None:
    rng = random.Random(7)
    for _ in range(50):
        assert pick_random(QUOTES, rng) in QUOTES


def test_pick_random_on_empty_raises() -> None:
    with pytest.raises(EmptySelectionError):
        pick_random([])


def test_restore_filter_falls_back_to_all() -> None:
    cats = ["Life", "Work"]
    assert restore_filter("life", cats) == "Life"
    assert restore_filter("Gone", cats) == "all"
    assert restore_filter(None, cats) == "all"
    assert restore_filter("all", cats) == "all"


def test_render_view_no_quotes_message() -> None:
    view = render_view(QUOTES, "Nope", None)

    assert view["quote_text"] == NO_QUOTES_TEXT
    assert view["count"] == 0
    assert view["categories"] == ["all", "Life", "work", "Art"]


def test_render_view_shows_last_quote_when_visible() -> None:
    view = render_view(QUOTES, "art", Quote("d", "Art"))

    assert view["quote"] == {"text": "d", "category": "Art"}
    assert view["quote_text"] == format_quote(Quote("d", "Art"))
    assert view["count"] == 1


def test_board_records_last_displayed_per_session(collection: QuoteCollection) -> None:
    session = SessionCache()
    board = QuoteBoard(collection, session, rng=random.Random(1))

    q = board.show_random("tab-1")

    assert q in DEFAULT_QUOTES
    assert board.last_quote("tab-1") == q
    assert session.get_json("tab-1", LAST_QUOTE_KEY) == q.to_dict()
    assert board.last_quote("tab-2") is None


def test_board_view_keeps_last_quote_on_reload(collection: QuoteCollection) -> None:
    board = QuoteBoard(collection, SessionCache())
    q = board.show_random("s")

    for _ in range(5):
        assert board.view("s")["quote"] == q.to_dict()


def test_board_filter_is_persisted_and_restored(collection: QuoteCollection) -> None:
    board = QuoteBoard(collection, SessionCache())

    q = board.set_filter("life", "s")

    assert board.selected == "Life"
    assert q == Quote("Life is what happens when you're busy making other plans.", "Life")
    assert QuoteBoard(collection, SessionCache()).selected == "Life"


def test_board_restores_all_when_saved_category_vanished(collection: QuoteCollection) -> None:
    collection.save_filter("Vanished")

    assert QuoteBoard(collection, SessionCache()).selected == "all"


def test_board_show_random_on_empty_collection(empty_collection: QuoteCollection) -> None:
    board = QuoteBoard(empty_collection, SessionCache())

    assert board.show_random("s") is None
    assert board.view("s")["quote_text"] == NO_QUOTES_TEXT
