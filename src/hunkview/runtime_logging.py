"""Structured JSONL runtime logging for hunkview.

The terminal belongs to the UI while it runs, so diagnostics go to a JSON
lines file under the state directory instead of stderr.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from hunkview.paths import state_root

LogLevel = Literal["off", "error", "warning", "info", "debug"]

LEVELS: dict[str, int] = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
    "off": 100,
}

_ALIASES = {"warn": "warning", "none": "off", "disabled": "off", "0": "off"}

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = "warning") -> LogLevel:
    if not value:
        return default
    normalized = value.strip().lower()
    normalized = _ALIASES.get(normalized, normalized)
    if normalized not in LEVELS:
        return default
    return normalized  # type: ignore[return-value]


def default_log_file() -> Path:
    return state_root() / "logs" / "hunkview.runtime.jsonl"


@dataclass(slots=True)
class RuntimeLogger:
    level: LogLevel
    sink_path: Path | None

    def enabled(self, level: str) -> bool:
        if self.sink_path is None:
            return False
        return LEVELS.get(level, LEVELS["debug"]) >= LEVELS[self.level]

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        assert self.sink_path is not None
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": level,
            "event": event,
            "pid": os.getpid(),
            **fields,
        }
        self.sink_path.parent.mkdir(parents=True, exist_ok=True)
        with self.sink_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, sort_keys=True, default=str) + "\n")

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)

    def exception(self, event: str, exc: BaseException, **fields: Any) -> None:
        self.log("error", event, error_type=type(exc).__name__, error=str(exc), **fields)


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> RuntimeLogger:
    global _runtime_logger

    effective_level = parse_level(level or os.getenv("HUNKVIEW_LOG_LEVEL"))
    if effective_level == "off":
        _runtime_logger = RuntimeLogger(level="off", sink_path=None)
        return _runtime_logger

    raw_file = log_file or os.getenv("HUNKVIEW_LOG_FILE")
    sink = Path(raw_file).expanduser().resolve() if raw_file else default_log_file()
    _runtime_logger = RuntimeLogger(level=effective_level, sink_path=sink)
    _runtime_logger.info("logging.configured", configured_level=effective_level, sink_path=str(sink))
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    global _runtime_logger
    if _runtime_logger is None:
        _runtime_logger = configure_runtime_logging()
    return _runtime_logger
