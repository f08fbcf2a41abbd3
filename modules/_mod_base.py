# /modules/_mod_base.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Mapping, Optional, Protocol

# ---------- Logging

class Logger(Protocol):
    def __call__(
        self,
        message: str,
        *,
        level: str = "INFO",
        module: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None: ...
    def set_context(self, **ctx: Any) -> None: ...
    def get_context(self) -> Dict[str, Any]: ...
    def bind(self, **ctx: Any) -> "Logger": ...
    def child(self, name: str) -> "Logger": ...

# ---------- Errors

class QuoteError(RuntimeError): ...
class ValidationError(QuoteError): ...        # empty text/category on add
class FormatError(QuoteError): ...            # import payload is not a JSON array
class DecodeError(QuoteError): ...            # persisted slot holds corrupt JSON
class TransportError(QuoteError): ...         # network failure or non-2xx on fetch/push
class EmptySelectionError(QuoteError): ...    # pick from an empty subset
class ConfigError(QuoteError): ...

# ---------- Status & results

class SyncStatus(Enum):
    IDLE = auto()
    RUNNING = auto()
    SUCCESS = auto()
    WARNING = auto()
    FAILED = auto()
    SKIPPED = auto()

@dataclass
class SyncResult:
    status: SyncStatus
    started_at: float
    finished_at: float
    duration_ms: int
    items_fetched: int = 0
    items_added: int = 0
    pushed: Optional[bool] = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.name,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_ms": self.duration_ms,
            "items_fetched": self.items_fetched,
            "items_added": self.items_added,
            "pushed": self.pushed,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }

# ---------- Meta

@dataclass(frozen=True)
class ModuleInfo:
    name: str
    version: str = "0.1.0"
    description: str = ""
    vendor: str = "community"
