from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from models import Termination, ToolResult
from services.config import ClipSettings
from services.events import ClipEvent
from services.pipeline import ClipPipeline
from services.store import jobs
from services.workspace import WorkspaceManager


def exited(code: int = 0, stderr: str = "", stdout: str = "") -> ToolResult:
    return ToolResult(termination=Termination.EXITED, exit_code=code, stdout=stdout, stderr=stderr)


class FakeRunner:
    """
    Stands in for ToolRunner. Successful calls create their output file (the
    last argument) so later steps and delivery find real files on disk.
    """

    def __init__(self, results: dict[str, list[ToolResult]] | None = None) -> None:
        self.calls: list[tuple[str, str, list[str], Any]] = []
        self._results = {step: list(queue) for step, queue in (results or {}).items()}

    @staticmethod
    def step_for(executable: str, args: list[str]) -> str:
        if "yt-dlp" in executable:
            return "fetch"
        return "render" if "-vf" in args else "trim"

    async def run(self, executable: str, args: list[str], *, cwd: Any = None) -> ToolResult:
        step = self.step_for(executable, args)
        self.calls.append((step, executable, list(args), cwd))
        queue = self._results.get(step)
        result = queue.pop(0) if queue else exited(0)
        if result.ok:
            Path(args[-1]).write_bytes(f"fake {step} output".encode())
        return result

    def args_for(self, step: str) -> list[str]:
        return [args for s, _, args, _ in self.calls if s == step][-1]


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[ClipEvent] = []

    def emit(self, event: ClipEvent) -> None:
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [e.name for e in self.events]


@pytest.fixture(autouse=True)
def clear_jobs() -> None:
    """Isolate tests by clearing the in-memory job store."""
    jobs.clear()
    yield
    jobs.clear()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    return tmp_path / "workspaces"


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_pipeline(workspace_root: Path, sink: RecordingSink):
    def _make(runner: FakeRunner, **overrides: Any) -> ClipPipeline:
        settings = ClipSettings(workspace_root=workspace_root, **overrides)
        return ClipPipeline(
            settings,
            workspace=WorkspaceManager(workspace_root),
            runner=runner,
            events=sink,
        )

    return _make


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
