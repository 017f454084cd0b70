"""
Clip pipeline: validate -> allocate workspace -> fetch -> (trim) -> render.

Each step blocks on one external process; a step's output file is the next
step's input, so nothing inside a job runs concurrently.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from models import ArtifactRef, ClipJob, ClipRequest, JobStatus, Termination, ToolResult
from services import commands
from services.config import ClipSettings, FetchMode
from services.errors import (
    RenderError,
    RetrievalError,
    ToolError,
    ToolTimeoutError,
    TrimError,
    stderr_excerpt,
)
from services.events import ClipEvent, EventSink, LoggingEventSink
from services.filters import build_vertical_filter
from services.tool_runner import ToolRunner
from services.validation import validate_request
from services.workspace import WorkspaceManager

SOURCE_FILENAME = "source.mp4"
EXTRACTED_FILENAME = "extracted.mp4"
OUTPUT_FILENAME = "output_1080x1920.mp4"


class ClipPipeline:
    def __init__(
        self,
        settings: ClipSettings | None = None,
        *,
        workspace: WorkspaceManager | None = None,
        runner: ToolRunner | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.settings = settings or ClipSettings()
        self.workspace = workspace or WorkspaceManager(
            self.settings.workspace_root, prefix=self.settings.workspace_prefix
        )
        self.runner = runner or ToolRunner(timeout=self.settings.tool_timeout)
        self.events = events or LoggingEventSink()

    def _emit(self, job: ClipJob, name: str, **fields: Any) -> None:
        self.events.emit(ClipEvent(job_id=job.id, name=name, fields=fields))

    def _advance(self, job: ClipJob, status: JobStatus) -> None:
        job.status = status
        self._emit(job, "status", status=status.value)

    async def run(self, job: ClipJob) -> ArtifactRef:
        """
        Drive ``job`` to COMPLETED and return the rendered artifact.

        Any failure moves the job to FAILED and re-raises. The workspace is
        kept for inspection unless ``settings.cleanup_on_failure`` is set.
        """
        self._emit(job, "job.received", url=job.url, start=job.start, end=job.end, title=job.title)
        try:
            request = validate_request(
                job.url,
                job.start,
                job.end,
                job.title,
                start_label=job.start_label,
                end_label=job.end_label,
            )
            self._advance(job, JobStatus.VALIDATED)

            job.workspace = self.workspace.allocate()
            self._advance(job, JobStatus.WORKSPACE_ALLOCATED)

            extracted = job.workspace / EXTRACTED_FILENAME
            output = job.workspace / OUTPUT_FILENAME

            if self.settings.fetch_mode is FetchMode.SECTIONS:
                await self._fetch(job, request, extracted, section=(request.start, request.end))
                self._advance(job, JobStatus.FETCHED)
            else:
                source = job.workspace / SOURCE_FILENAME
                await self._fetch(job, request, source, section=None)
                self._advance(job, JobStatus.FETCHED)
                await self._trim(job, request, source, extracted)
                self._advance(job, JobStatus.TRIMMED)

            await self._render(job, request, extracted, output)
            self._advance(job, JobStatus.TRANSFORMED)
        except Exception as exc:
            self._fail(job, exc)
            raise

        job.artifact = ArtifactRef(file_path=output, workspace=job.workspace)
        job.finished_at = datetime.now(timezone.utc)
        self._advance(job, JobStatus.COMPLETED)
        self._emit(job, "job.completed", artifact=str(output), workspace=str(job.workspace))
        return job.artifact

    def _fail(self, job: ClipJob, exc: Exception) -> None:
        job.status = JobStatus.FAILED
        job.error = str(exc)
        job.finished_at = datetime.now(timezone.utc)
        self._emit(job, "job.failed", error_type=type(exc).__name__, error=str(exc))
        if job.workspace is None:
            return
        if self.settings.cleanup_on_failure:
            self.workspace.release(job.workspace)
        else:
            self._emit(job, "workspace.kept", workspace=str(job.workspace))

    async def _invoke(self, job: ClipJob, step: str, executable: str, args: list[str]) -> ToolResult:
        self._emit(job, f"{step}.start", executable=executable, args=args)
        result = await self.runner.run(executable, args, cwd=job.workspace)
        self._emit(
            job,
            f"{step}.finish",
            status=result.describe(),
            stdout_chars=len(result.stdout),
            stderr_chars=len(result.stderr),
        )
        return result

    def _check(self, result: ToolResult, tool: str, error_cls: type[ToolError]) -> None:
        if result.ok:
            return
        excerpt = stderr_excerpt(result.stderr)
        if result.termination is Termination.TIMED_OUT:
            raise ToolTimeoutError(f"{tool} {result.describe()}: {excerpt}", detail=excerpt)
        raise error_cls(f"{tool} failed ({result.describe()}): {excerpt}", detail=excerpt)

    async def _fetch(
        self,
        job: ClipJob,
        request: ClipRequest,
        target: Path,
        *,
        section: tuple[float, float] | None,
    ) -> None:
        args = commands.fetch_args(
            request.source_url,
            target,
            section=section,
            format_selector=self.settings.format_selector,
        )
        attempts = self.settings.retrieval_attempts
        for attempt in range(1, attempts + 1):
            result = await self._invoke(job, "fetch", self.settings.ytdlp_bin, args)
            if result.ok or attempt == attempts:
                break
            self._emit(job, "fetch.retry", attempt=attempt, status=result.describe())
        self._check(result, "yt-dlp", RetrievalError)

    async def _trim(self, job: ClipJob, request: ClipRequest, source: Path, target: Path) -> None:
        args = commands.trim_args(source, target, start=request.start, duration=request.duration)
        result = await self._invoke(job, "trim", self.settings.ffmpeg_bin, args)
        self._check(result, "ffmpeg trim", TrimError)

    async def _render(self, job: ClipJob, request: ClipRequest, source: Path, target: Path) -> None:
        s = self.settings
        video_filter = build_vertical_filter(
            request.title, width=s.width, height=s.height, font_size=s.font_size
        )
        args = commands.render_args(
            source,
            target,
            video_filter=video_filter,
            preset=s.video_preset,
            crf=s.video_crf,
            audio_bitrate=s.audio_bitrate,
        )
        result = await self._invoke(job, "render", s.ffmpeg_bin, args)
        self._check(result, "ffmpeg convert", RenderError)
