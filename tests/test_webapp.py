import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from conftest import FakeResponse, FakeSession, remote_posts

from _config import config_path, merge_defaults
from _logging import LEVELS
from _quotes import DEFAULT_QUOTES
from webapp import SESSION_COOKIE, create_app


@pytest.fixture
def session() -> FakeSession:
    return FakeSession(get=remote_posts("server says hi"))


@pytest.fixture
def client(tmp_path: Path, session: FakeSession) -> TestClient:
    cfg = merge_defaults({
        "storage": {"local_path": str(tmp_path / "web_storage.json")},
        "remote": {"url": "https://example.test/posts"},
        "sync": {"enabled": False},
    })
    return TestClient(create_app(cfg, http_session=session, persist_config=False))


def test_index_serves_page(client: TestClient) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert "categoryFilter" in r.text


def test_view_sets_session_cookie_and_keeps_quote(client: TestClient) -> None:
    r1 = client.get("/api/view")
    assert r1.status_code == 200
    assert SESSION_COOKIE in r1.cookies or SESSION_COOKIE in client.cookies
    first = r1.json()["quote"]

    r2 = client.get("/api/view")

    assert r2.json()["quote"] == first
    assert r2.json()["categories"] == ["all", "Motivation", "Inspiration", "Life"]
    assert r2.headers["Cache-Control"] == "no-store"


def test_add_quote(client: TestClient) -> None:
    r = client.post("/api/quotes", json={"text": "Carpe diem", "category": "Latin"})

    assert r.status_code == 200
    assert r.json()["quote"] == {"text": "Carpe diem", "category": "Latin"}
    items = client.get("/api/quotes").json()
    assert len(items["items"]) == len(DEFAULT_QUOTES) + 1
    assert "Latin" in items["categories"]
    notes = client.get("/api/notifications").json()["items"]
    assert notes[-1]["message"] == "Quote added successfully!"


def test_add_quote_validation_error(client: TestClient) -> None:
    r = client.post("/api/quotes", json={"text": "  ", "category": "Latin"})

    assert r.status_code == 400
    assert r.json()["ok"] is False
    assert r.json()["kind"] == "ValidationError"
    assert len(client.get("/api/quotes").json()["items"]) == len(DEFAULT_QUOTES)


def test_filter_round_trip(client: TestClient) -> None:
    r = client.post("/api/filter", json={"category": "life"})

    assert r.json()["selected"] == "Life"
    assert r.json()["view"]["count"] == 1
    assert client.get("/api/filter").json() == {"selected": "Life"}
    assert client.get("/api/quote/random").json()["quote"]["category"] == "Life"


def test_export_is_attachment(client: TestClient) -> None:
    r = client.get("/api/export")

    assert r.status_code == 200
    assert "quotes.json" in r.headers["Content-Disposition"]
    assert json.loads(r.text) == [q.to_dict() for q in DEFAULT_QUOTES]


def test_import_appends_valid_entries(client: TestClient) -> None:
    body = json.dumps([{"text": "A", "category": "X"}, {"text": ""}])

    r = client.post("/api/import", content=body)

    assert r.status_code == 200
    assert r.json()["imported"] == 1


def test_import_non_array_is_rejected(client: TestClient) -> None:
    r = client.post("/api/import", content=json.dumps("not an array"))

    assert r.status_code == 400
    assert r.json()["kind"] == "FormatError"
    assert len(client.get("/api/quotes").json()["items"]) == len(DEFAULT_QUOTES)


def test_sync_run_merges_server_quotes(client: TestClient, session: FakeSession) -> None:
    r = client.post("/api/sync/run")

    assert r.status_code == 200
    assert r.json()["status"] == "SUCCESS"
    assert r.json()["items_added"] == 1
    cats = client.get("/api/categories").json()["categories"]
    assert "Server" in cats
    msgs = [n["message"] for n in client.get("/api/notifications").json()["items"]]
    assert "1 new quote(s) merged from server." in msgs
    status = client.get("/api/sync/status").json()
    assert status["engine"]["items_added"] == 1


def test_sync_run_push_failure_reported(tmp_path: Path) -> None:
    cfg = merge_defaults({"storage": {"local_path": str(tmp_path / "s.json")}, "sync": {"enabled": False}})
    app = create_app(cfg, http_session=FakeSession(post=FakeResponse(500, text="x")), persist_config=False)
    client = TestClient(app)

    r = client.post("/api/sync/run")

    assert r.json()["pushed"] is False
    msgs = [n["message"] for n in client.get("/api/notifications").json()["items"]]
    assert "Failed to push quotes to server." in msgs


def test_config_update_reconfigures_engine(client: TestClient) -> None:
    cfg = client.get("/api/config").json()
    cfg["remote"]["fetch_limit"] = 2
    cfg["sync"]["enabled"] = False

    assert client.post("/api/config", json=cfg).json() == {"ok": True}
    assert client.app.state.runtime.engine.fetch_limit == 2


def test_config_update_rejects_bad_interval(client: TestClient) -> None:
    cfg = client.get("/api/config").json()
    cfg["sync"]["interval_sec"] = 0

    r = client.post("/api/config", json=cfg)
    assert r.status_code == 400
    assert r.json()["kind"] == "ConfigError"
    assert client.app.state.runtime.cfg["sync"]["interval_sec"] == 15


def test_logs_endpoint_filters_by_module(client: TestClient) -> None:
    client.post("/api/import", content=json.dumps([{"text": "Logged", "category": "Ops"}]))

    items = client.get("/api/logs", params={"module": "QUOTES"}).json()["items"]

    assert items and all(r["module"] == "QUOTES" for r in items)
    assert any(r["msg"].startswith("imported 1 quotes") for r in items)


def test_rejected_config_leaves_running_and_saved_config(tmp_path: Path, session: FakeSession) -> None:
    cfg = merge_defaults({
        "storage": {"local_path": str(tmp_path / "web_storage.json")},
        "remote": {"url": "https://example.test/posts"},
        "sync": {"enabled": False},
    })
    client = TestClient(create_app(cfg, http_session=session))
    good = client.get("/api/config").json()
    good["remote"]["fetch_limit"] = 3
    assert client.post("/api/config", json=good).status_code == 200

    bad = json.loads(json.dumps(good))
    bad["remote"]["fetch_limit"] = "five"
    r = client.post("/api/config", json=bad)

    assert r.status_code == 400
    assert r.json()["kind"] == "ConfigError"
    saved = json.loads(config_path().read_text(encoding="utf-8"))
    assert saved["remote"]["fetch_limit"] == 3
    rt = client.app.state.runtime
    assert rt.cfg["remote"]["fetch_limit"] == 3
    assert rt.engine.fetch_limit == 3


def test_debug_flag_reaches_component_loggers(client: TestClient) -> None:
    cfg = client.get("/api/config").json()
    cfg["runtime"]["debug"] = True

    assert client.post("/api/config", json=cfg).status_code == 200

    rt = client.app.state.runtime
    assert rt.engine._log.level_no == LEVELS["debug"]
    assert rt.collection._log.level_no == LEVELS["debug"]
    assert rt.notifier._log.level_no == LEVELS["debug"]


def test_cookieless_requests_keep_session_cache_bounded(client: TestClient) -> None:
    rt = client.app.state.runtime
    rt.session.max_sessions = 5

    for _ in range(20):
        client.cookies.clear()
        assert client.get("/api/view").status_code == 200

    assert len(rt.session) == 5
