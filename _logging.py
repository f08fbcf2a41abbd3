# _logging.py
from __future__ import annotations
import sys, datetime, json, threading
from collections import deque
from typing import Any, Deque, Dict, List, Mapping, Optional, TextIO

RESET = "\033[0m"
DIM = "\033[90m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[33m"
BLUE = "\033[94m"

LEVELS = {"silent": 60, "error": 40, "warn": 30, "info": 20, "debug": 10}
LEVEL_TAG = {"debug": "[debug]", "info": "[i]", "warn": "[!]", "error": "[!]", "success": "[✓]"}

MAX_BUFFER_LINES = 500


class Logger:
    """Stdout logger for quote sync with context binding, a JSON file sink and a ring buffer for the web UI."""
    def __init__(
        self,
        stream: TextIO = sys.stdout,
        level: str = "info",
        use_color: bool = True,
        show_time: bool = True,
        time_fmt: str = "%Y-%m-%d %H:%M:%S",
        *,
        _context: Optional[Dict[str, Any]] = None,
        _json_stream: Optional[TextIO] = None,
        _buffer: Optional[Deque[Dict[str, Any]]] = None,
        _lock: Optional[threading.Lock] = None,
        _level: Optional[List[int]] = None,
    ):
        self.stream = stream
        # level holder and buffer are shared with bound children
        self._level: List[int] = _level if _level is not None else [LEVELS.get(level, 20)]
        self.use_color = use_color
        self.show_time = show_time
        self.time_fmt = time_fmt
        self._context: Dict[str, Any] = dict(_context or {})
        self._json_stream: Optional[TextIO] = _json_stream
        self._buffer: Deque[Dict[str, Any]] = _buffer if _buffer is not None else deque(maxlen=MAX_BUFFER_LINES)
        self._lock = _lock or threading.Lock()

    # ----- config
    @property
    def level_no(self) -> int:
        return self._level[0]

    def set_level(self, level: str) -> None:
        self._level[0] = LEVELS.get(level, self._level[0])

    def enable_color(self, on: bool = True) -> None:
        self.use_color = on

    def enable_json(self, file_path: str) -> None:
        self._json_stream = open(file_path, "a", encoding="utf-8")

    @property
    def level_name(self) -> str:
        for k, v in LEVELS.items():
            if v == self.level_no:
                return k
        return "info"

    # ----- context
    def set_context(self, **ctx: Any) -> None:
        self._context.update(ctx)

    def get_context(self) -> Dict[str, Any]:
        return dict(self._context)

    def bind(self, **ctx: Any) -> "Logger":
        new_ctx = dict(self._context); new_ctx.update(ctx)
        child = Logger(
            stream=self.stream,
            use_color=self.use_color,
            show_time=self.show_time,
            time_fmt=self.time_fmt,
            _context=new_ctx,
            _json_stream=self._json_stream,
            _buffer=self._buffer,
            _lock=self._lock,
            _level=self._level,
        )
        return child

    def child(self, name: str) -> "Logger":
        return self.bind(module=name)

    # ----- buffer
    def recent(self, limit: int = 100, module: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            rows = list(self._buffer)
        if module:
            rows = [r for r in rows if r.get("module") == module]
        return rows[-limit:] if limit > 0 else rows

    def clear_buffer(self) -> None:
        with self._lock:
            self._buffer.clear()

    # ----- formatters
    def _fmt_text(self, level: str, msg: str) -> str:
        tag = LEVEL_TAG.get(level, "[i]")
        mod = self._context.get("module")
        head = f"{tag} [{mod}]" if mod else tag
        if self.use_color:
            col = {"[i]": BLUE, "[debug]": YELLOW, "[✓]": GREEN, "[!]": RED}.get(tag, "")
            head = head.replace(tag, f"{col}{tag}{RESET}", 1)
        line = f"{head} {msg}"
        if self.show_time:
            ts = datetime.datetime.now().strftime(self.time_fmt)
            prefix = f"{DIM}[{ts}]{RESET}" if self.use_color else f"[{ts}]"
            return f"{prefix} {line}"
        return line

    def _emit(self, level: str, parts: tuple, extra: Optional[Mapping[str, Any]]) -> None:
        msg = " ".join(str(p) for p in parts)
        text = self._fmt_text(level, msg)
        row = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds"),
            "level": "info" if level == "success" else level,
            "module": self._context.get("module"),
            "msg": msg,
        }
        with self._lock:
            self.stream.write(text + "\n")
            self.stream.flush()
            self._buffer.append(row)
            if self._json_stream:
                payload = dict(row, ctx=self._context or {})
                if extra:
                    payload["extra"] = dict(extra)
                self._json_stream.write(json.dumps(payload, ensure_ascii=False) + "\n")
                self._json_stream.flush()

    # ----- public API
    def debug(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        if self.level_no <= LEVELS["debug"]:
            self._emit("debug", parts, extra)

    def info(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        if self.level_no <= LEVELS["info"]:
            self._emit("info", parts, extra)

    def warn(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        if self.level_no <= LEVELS["warn"]:
            self._emit("warn", parts, extra)

    # alias for libraries that call .warning
    def warning(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self.warn(*parts, extra=extra)

    def error(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        if self.level_no <= LEVELS["error"]:
            self._emit("error", parts, extra)

    def success(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        if self.level_no <= LEVELS["info"]:
            self._emit("success", parts, extra)

    # callable adapter: logger("text", level="INFO", extra={...})
    def __call__(
        self,
        message: str,
        *,
        level: str = "INFO",
        module: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        target = self.bind(module=module) if module else self
        lvl = (level or "INFO").lower()
        if   lvl == "debug":   target.debug(message, extra=extra)
        elif lvl in ("warn", "warning"): target.warn(message, extra=extra)
        elif lvl == "error":   target.error(message, extra=extra)
        elif lvl == "success": target.success(message, extra=extra)
        else:                  target.info(message, extra=extra)

# default instance
log = Logger()

__all__ = ["Logger", "log", "LEVELS", "RESET", "DIM", "RED", "GREEN", "YELLOW", "BLUE"]
