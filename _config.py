# _config.py
# Config for quote sync: config.json next to the app (or /config in a container).

from __future__ import annotations
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from _logging import log
from modules._mod_base import ConfigError

ROOT = Path(__file__).resolve().parent


def config_base() -> Path:
    env = os.getenv("QUOTE_SYNC_CONFIG_DIR")
    if env:
        return Path(env).expanduser()
    return Path("/config") if str(ROOT).startswith("/app") else ROOT


DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "local_path": "",               # empty -> <config base>/local_storage.json
    },
    "remote": {
        "url": "https://jsonplaceholder.typicode.com/posts",
        "fetch_limit": 5,
        "category": "Server",
        "timeout_sec": 15,
    },
    "sync": {
        "enabled": True,
        "interval_sec": 15,
        "push_enabled": True,
    },
    "ui": {
        "notification_ttl_sec": 4,
    },
    "runtime": {
        "debug": False,
    },
}


def config_path() -> Path:
    return config_base() / "config.json"


def merge_defaults(cfg: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    out = copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(cfg, dict):
        return out
    for k, v in cfg.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k].update({kk: vv for kk, vv in v.items() if vv is not None})
        elif v is not None:
            out[k] = v
    return out


def _write_json(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    tmp.replace(p)


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read config.json, filling missing sections; a missing or broken file is replaced by defaults."""
    p = Path(path) if path else config_path()
    if p.exists():
        try:
            with p.open("r", encoding="utf-8") as f:
                return merge_defaults(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            log.child("CONFIG").warn(f"could not parse {p} as JSON ({e}); using defaults")
    cfg = merge_defaults(None)
    save_config(cfg, p)
    return cfg


def save_config(cfg: Dict[str, Any], path: Optional[Path] = None) -> None:
    _write_json(Path(path) if path else config_path(), merge_defaults(cfg))


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Reject settings the runtime cannot run with; returns cfg unchanged."""
    remote = cfg.get("remote") or {}
    url = remote.get("url")
    if not isinstance(url, str) or not url.startswith(("http://", "https://")):
        raise ConfigError(f"remote.url must be an http(s) URL, got {url!r}")
    limit = remote.get("fetch_limit")
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
        raise ConfigError(f"remote.fetch_limit must be a non-negative integer, got {limit!r}")
    positive = (
        ("remote", "timeout_sec"),
        ("sync", "interval_sec"),
        ("ui", "notification_ttl_sec"),
    )
    for section, key in positive:
        v = (cfg.get(section) or {}).get(key)
        if not _is_number(v) or v <= 0:
            raise ConfigError(f"{section}.{key} must be a positive number, got {v!r}")
    return cfg


def storage_path(cfg: Dict[str, Any]) -> Path:
    raw = ((cfg.get("storage") or {}).get("local_path") or "").strip()
    return Path(raw).expanduser() if raw else config_base() / "local_storage.json"
