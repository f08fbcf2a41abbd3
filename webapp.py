#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Web UI backend (FastAPI) for the quote generator.

Run:  python webapp.py            (binds 0.0.0.0:8787)
  or  uvicorn webapp:create_app --factory
"""
import secrets
import socket
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from _FastAPI import get_index_html
from _config import config_path, load_config, merge_defaults, save_config, validate_config
from _logging import log
from _runtime import Runtime, build_runtime
from _scheduling import SyncScheduler
from modules._mod_base import QuoteError

__VERSION__ = "0.4.0"

SESSION_COOKIE = "qs_session"

# --- Favicon (SVG) ---
FAVICON_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 64 64">
<defs><linearGradient id="g" x1="0" y1="0" x2="64" y2="64" gradientUnits="userSpaceOnUse">
<stop offset="0" stop-color="#2de2ff"/><stop offset="0.5" stop-color="#7c5cff"/><stop offset="1" stop-color="#ff7ae0"/></linearGradient></defs>
<rect width="64" height="64" rx="14" fill="#0b0b0f"/>
<path d="M16 22h12v12c0 6-4 10-10 10v-4c3 0 5-2 5-6h-7z M36 22h12v12c0 6-4 10-10 10v-4c3 0 5-2 5-6h-7z" fill="url(#g)"/>
</svg>"""

INDEX_HTML = get_index_html()


# ---------- Session id ----------
def session_id(request: Request, response: Response) -> str:
    """One id per browser; scopes the last-viewed quote like tab session storage."""
    sid = request.cookies.get(SESSION_COOKIE)
    if not sid:
        sid = secrets.token_urlsafe(16)
        response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="lax")
    return sid


def get_primary_ip() -> str:
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(("8.8.8.8", 80)); return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        s.close()


# ---------- App factory ----------
def create_app(
    cfg: Optional[Dict[str, Any]] = None,
    http_session: Any = None,
    persist_config: bool = True,
) -> FastAPI:
    rt: Runtime = build_runtime(cfg, http_session=http_session)
    wlog = log.child("WEB")

    def _load_cfg() -> Dict[str, Any]:
        return rt.cfg

    def _run_sync() -> bool:
        res = rt.engine.tick()
        return res.status.name in ("SUCCESS", "WARNING")

    scheduler = SyncScheduler(_load_cfg, run_sync_fn=_run_sync, is_sync_running_fn=rt.engine.is_running)

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        if (rt.cfg.get("sync") or {}).get("enabled"):
            scheduler.start()
        try:
            yield
        finally:
            scheduler.stop()

    app = FastAPI(lifespan=_lifespan, title="Quote Sync", version=__VERSION__)
    app.state.runtime = rt
    app.state.scheduler = scheduler

    @app.exception_handler(QuoteError)
    async def _quote_error(request: Request, exc: QuoteError) -> JSONResponse:
        rt.notifier.notify(str(exc), "error")
        return JSONResponse({"ok": False, "error": str(exc), "kind": type(exc).__name__}, status_code=400)

    @app.middleware("http")
    async def cache_headers_for_api(request: Request, call_next):
        resp = await call_next(request)
        # Never cache JSON/API responses in the browser
        if request.url.path.startswith("/api/"):
            resp.headers["Cache-Control"] = "no-store"
            resp.headers["Pragma"] = "no-cache"
            resp.headers["Expires"] = "0"
        return resp

    # ---- Page ----
    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(INDEX_HTML)

    @app.get("/favicon.svg", include_in_schema=False)
    def favicon_svg():
        return Response(content=FAVICON_SVG, media_type="image/svg+xml")

    @app.get("/favicon.ico", include_in_schema=False)
    def favicon_ico():
        return Response(content=FAVICON_SVG, media_type="image/svg+xml")

    # ---- Quotes ----
    @app.get("/api/view")
    def api_view(sid: str = Depends(session_id)) -> Dict[str, Any]:
        return rt.board.view(sid)

    @app.get("/api/quotes")
    def api_quotes() -> Dict[str, Any]:
        return {"items": rt.collection.to_list(), "categories": rt.collection.categories()}

    @app.post("/api/quotes")
    def api_quote_add(payload: Dict[str, Any] = Body(...), sid: str = Depends(session_id)) -> Dict[str, Any]:
        q = rt.collection.add(payload.get("text"), payload.get("category"))
        rt.notifier.notify("Quote added successfully!", "success")
        rt.board.show_random(sid)
        return {"ok": True, "quote": q.to_dict(), "view": rt.board.view(sid)}

    @app.get("/api/quote/random")
    def api_quote_random(sid: str = Depends(session_id)) -> Dict[str, Any]:
        q = rt.board.show_random(sid)
        return {"ok": True, "quote": q.to_dict() if q else None, "view": rt.board.view(sid)}

    @app.get("/api/quote/last")
    def api_quote_last(sid: str = Depends(session_id)) -> Dict[str, Any]:
        q = rt.board.last_quote(sid)
        return {"quote": q.to_dict() if q else None}

    @app.get("/api/categories")
    def api_categories() -> Dict[str, Any]:
        return {"categories": rt.collection.categories(), "selected": rt.board.selected}

    @app.get("/api/filter")
    def api_filter_get() -> Dict[str, Any]:
        return {"selected": rt.board.selected}

    @app.post("/api/filter")
    def api_filter_set(payload: Dict[str, Any] = Body(...), sid: str = Depends(session_id)) -> Dict[str, Any]:
        rt.board.set_filter(str(payload.get("category") or "all"), sid)
        return {"ok": True, "selected": rt.board.selected, "view": rt.board.view(sid)}

    # ---- Import / export ----
    @app.get("/api/export")
    def api_export() -> Response:
        return Response(
            content=rt.collection.export_json(),
            media_type="application/json",
            headers={"Content-Disposition": 'attachment; filename="quotes.json"'},
        )

    @app.post("/api/import")
    async def api_import(request: Request, sid: str = Depends(session_id)) -> Dict[str, Any]:
        raw = (await request.body()).decode("utf-8", errors="replace")
        added = rt.collection.import_json(raw)
        rt.notifier.notify("Quotes imported successfully!", "success")
        return {"ok": True, "imported": len(added), "view": rt.board.view(sid)}

    # ---- Notifications & logs ----
    @app.get("/api/notifications")
    def api_notifications(since: int = Query(0)) -> Dict[str, Any]:
        return {"items": rt.notifier.active(since_id=since)}

    @app.get("/api/logs")
    def api_logs(limit: int = Query(100), module: Optional[str] = Query(None)) -> Dict[str, Any]:
        return {"items": log.recent(limit=limit, module=module)}

    # ---- Sync ----
    @app.post("/api/sync/run")
    def api_sync_run() -> Dict[str, Any]:
        return rt.engine.tick().to_dict()

    @app.get("/api/sync/status")
    def api_sync_status() -> Dict[str, Any]:
        return {"engine": dict(rt.engine.get_status()), "scheduler": scheduler.status()}

    # ---- Config ----
    @app.get("/api/config")
    def api_config() -> Dict[str, Any]:
        return rt.cfg

    @app.post("/api/config")
    def api_config_save(new_cfg: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        merged = validate_config(merge_defaults(new_cfg))
        rt.reconfigure(merged)
        if persist_config:
            save_config(merged)
        if (merged.get("sync") or {}).get("enabled"):
            scheduler.refresh()
        else:
            scheduler.stop()
        wlog.info("config updated")
        return {"ok": True}

    return app


# ---- Main ----
def main(host: str = "0.0.0.0", port: int = 8787) -> None:
    cfg = load_config()
    ip = get_primary_ip()
    print("\nQuote Sync Web UI running:")
    print(f"  Local:   http://127.0.0.1:{port}")
    print(f"  Docker:  http://{ip}:{port}")
    print(f"  Bind:    {host}:{port}")
    print(f"  Config:  {config_path()} (JSON)")
    print(f"  Remote:  {(cfg.get('remote') or {}).get('url')}\n")
    uvicorn.run(create_app(cfg), host=host, port=port)

if __name__ == "__main__":
    main()
