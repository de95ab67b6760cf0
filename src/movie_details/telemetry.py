"""Pipeline run events.

Events land in a bounded in-process buffer (the HTTP service keeps one
process alive across invokes, so only the newest ``MAX_BUFFERED_EVENTS``
are kept) and, when ``MOVIE_DETAILS_TELEMETRY_LOG`` names a file, are
appended to it as JSON lines.
"""

from __future__ import annotations

import json
import logging
import os
from collections import deque
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Optional

if TYPE_CHECKING:
    from .schemas import PipelineRecord

_LOG = logging.getLogger("movie_details.telemetry")

TELEMETRY_LOG_ENV = "MOVIE_DETAILS_TELEMETRY_LOG"
MAX_BUFFERED_EVENTS = 1000

_EVENTS: Deque[Dict[str, Any]] = deque(maxlen=MAX_BUFFERED_EVENTS)


def _append_to_log(event: Dict[str, Any]) -> None:
    log_path = os.environ.get(TELEMETRY_LOG_ENV)
    if not log_path:
        return
    try:
        with open(log_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(event, default=str) + "\n")
    except OSError as exc:
        _LOG.debug("Could not append telemetry event to %s: %s", log_path, exc)


def emit_event(name: str, payload: Optional[Dict[str, Any]] = None) -> None:
    event: Dict[str, Any] = {"name": name, "payload": dict(payload or {})}
    _EVENTS.append(event)
    _append_to_log(event)


def emit_run_event(name: str, record: PipelineRecord, **fields: Any) -> None:
    """Emit ``name`` tagged with the run id and current lookup title of ``record``."""

    payload: Dict[str, Any] = {"run_id": record.run_id, "title": record.lookup_title}
    payload.update(fields)
    emit_event(name, payload)


def get_events(name: Optional[str] = None) -> List[Dict[str, Any]]:
    """Return a copy of the buffered events, optionally only those called ``name``."""
    return [event for event in _EVENTS if name is None or event["name"] == name]


def clear_events() -> None:
    _EVENTS.clear()


__all__ = [
    "MAX_BUFFERED_EVENTS",
    "TELEMETRY_LOG_ENV",
    "clear_events",
    "emit_event",
    "emit_run_event",
    "get_events",
]
