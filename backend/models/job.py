from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from .clip import ArtifactRef


class JobStatus(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    WORKSPACE_ALLOCATED = "workspace_allocated"
    FETCHED = "fetched"
    TRIMMED = "trimmed"
    TRANSFORMED = "transformed"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ClipJob:
    id: str
    url: Any = None
    start: Any = None
    end: Any = None
    title: Any = None
    start_label: str | None = None
    end_label: str | None = None
    status: JobStatus = JobStatus.RECEIVED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    workspace: Path | None = None
    artifact: ArtifactRef | None = None
    error: str | None = None
