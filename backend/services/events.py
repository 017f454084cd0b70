"""Structured, job-tagged pipeline events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol


@dataclass(frozen=True)
class ClipEvent:
    job_id: str
    name: str                              # e.g. "fetch.start", "render.failed"
    fields: dict[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventSink(Protocol):
    def emit(self, event: ClipEvent) -> None: ...


class LoggingEventSink:
    """Writes each event as one log record; failures are logged at ERROR."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logging.getLogger("clip_pipeline")

    def emit(self, event: ClipEvent) -> None:
        level = logging.ERROR if event.name.endswith(".failed") else logging.INFO
        details = " ".join(f"{k}={v!r}" for k, v in event.fields.items())
        self._log.log(level, "[clip_pipeline] job=%s %s %s", event.job_id, event.name, details)
