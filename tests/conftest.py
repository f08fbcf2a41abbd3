from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import pytest
import requests

from _logging import log
from _quotes import QuoteCollection
from _store import LocalStore


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else json.dumps(payload))

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records calls and replays canned responses."""

    def __init__(self, get: Any = None, post: Any = None) -> None:
        self.get_result = get if get is not None else FakeResponse(200, [])
        self.post_result = post if post is not None else FakeResponse(201, {"id": 101})
        self.calls: List[tuple] = []

    def _reply(self, result: Any) -> FakeResponse:
        if isinstance(result, BaseException):
            raise result
        return result

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("GET", url, kwargs))
        return self._reply(self.get_result)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("POST", url, kwargs))
        return self._reply(self.post_result)


def remote_posts(*titles: str) -> FakeResponse:
    return FakeResponse(200, [{"userId": 1, "id": i + 1, "title": t, "body": "..."} for i, t in enumerate(titles)])


def transport_failure() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")


@pytest.fixture(autouse=True)
def _isolate_config_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    cfg_dir = tmp_path / "config"
    monkeypatch.setenv("QUOTE_SYNC_CONFIG_DIR", str(cfg_dir))
    return cfg_dir


@pytest.fixture(autouse=True)
def _reset_log_level() -> Any:
    yield
    log.set_level("info")


@pytest.fixture
def store(tmp_path: Path) -> LocalStore:
    return LocalStore(tmp_path / "local_storage.json")


@pytest.fixture
def collection(store: LocalStore) -> QuoteCollection:
    c = QuoteCollection(store)
    c.load()
    return c


@pytest.fixture
def empty_collection(store: LocalStore) -> QuoteCollection:
    c = QuoteCollection(store)
    c.set([])
    return c
