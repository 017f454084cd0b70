from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class ClipRequest:
    source_url: str
    start: float               # seconds, >= 0
    end: float                 # seconds, > start
    title: str
    start_label: str | None = None   # display-only, e.g. "00:00:30"
    end_label: str | None = None

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class ArtifactRef:
    file_path: Path            # final rendered file inside the workspace
    workspace: Path            # workspace directory that owns file_path


class Termination(str, Enum):
    EXITED = "exited"
    SIGNALED = "signaled"
    TIMED_OUT = "timed_out"
    SPAWN_FAILED = "spawn_failed"


@dataclass(frozen=True)
class ToolResult:
    termination: Termination
    exit_code: int | None = None
    signal: int | None = None
    stdout: str = ""
    stderr: str = ""
    timeout: float | None = None

    @property
    def ok(self) -> bool:
        return self.termination is Termination.EXITED and self.exit_code == 0

    def describe(self) -> str:
        if self.termination is Termination.EXITED:
            return f"code {self.exit_code}"
        if self.termination is Termination.SIGNALED:
            return f"signal {self.signal}" if self.signal is not None else "terminated abnormally"
        if self.termination is Termination.TIMED_OUT:
            return f"timeout after {self.timeout:g}s"
        return "could not start"
