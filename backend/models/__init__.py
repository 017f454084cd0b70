from .clip import ArtifactRef, ClipRequest, Termination, ToolResult
from .job import ClipJob, JobStatus

__all__ = [
    "ArtifactRef",
    "ClipRequest",
    "ClipJob",
    "JobStatus",
    "Termination",
    "ToolResult",
]
