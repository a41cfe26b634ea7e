from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from threading import Lock


_TRACE_LOCK = Lock()
_TRACE_PATH: Path | None = None


def _format_value(value: object) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:#x}" if value > 0xFFFF else str(value)
    text = str(value)
    return text.replace("\n", "\\n")


def _format_fields(fields: dict[str, object]) -> str:
    parts: list[str] = []
    for key in sorted(fields):
        parts.append(f"{key}={_format_value(fields[key])}")
    return " ".join(parts)


def trace_log_path() -> Path | None:
    with _TRACE_LOCK:
        return _TRACE_PATH


def init_trace_log(path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with _TRACE_LOCK:
        global _TRACE_PATH
        _TRACE_PATH = path

    trace_event("init", pid=int(os.getpid()))
    return path


def trace_enabled() -> bool:
    return _TRACE_PATH is not None


def trace_event(event: str, **fields: object) -> None:
    if _TRACE_PATH is None:
        return
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    payload = _format_fields(fields)
    line = f"{timestamp} event={str(event).strip()}"
    if payload:
        line += f" {payload}"
    line += "\n"

    with _TRACE_LOCK:
        path = _TRACE_PATH
        if path is None:
            return
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line)


def close_trace_log() -> None:
    with _TRACE_LOCK:
        global _TRACE_PATH
        _TRACE_PATH = None


__all__ = [
    "close_trace_log",
    "init_trace_log",
    "trace_enabled",
    "trace_event",
    "trace_log_path",
]
