"""Run external command-line tools and capture how they ended."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import signal
from pathlib import Path

from models import Termination, ToolResult

logger = logging.getLogger(__name__)

KILL_GRACE_SECONDS = 5.0
_READ_CHUNK = 64 * 1024
# Each child leads its own process group so a timeout can kill the helpers it
# spawned too (yt-dlp starts ffmpeg for --download-sections).
_PROCESS_GROUPS = os.name == "posix"


def _decode(data: bytes | bytearray | None) -> str:
    return bytes(data or b"").decode("utf-8", errors="replace")


async def _drain(stream: asyncio.StreamReader, sink: bytearray) -> None:
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return
        sink.extend(chunk)


def _kill_tree(proc: asyncio.subprocess.Process) -> None:
    try:
        if _PROCESS_GROUPS:
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass


class ToolRunner:
    """
    Spawns one external process per call and resolves a ToolResult.

    ``run`` never raises for process outcomes: non-zero exits, signals,
    timeouts and missing executables all come back as a ToolResult so the
    caller decides what is fatal. Output read before a timeout is kept.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        return self._timeout

    async def run(
        self,
        executable: str,
        args: list[str],
        *,
        cwd: Path | str | None = None,
    ) -> ToolResult:
        logger.debug("[tool_runner] %s", shlex.join([executable, *args]))
        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_PROCESS_GROUPS,
            )
        except OSError as exc:
            logger.error("[tool_runner] Could not start %s: %s", executable, exc)
            return ToolResult(termination=Termination.SPAWN_FAILED, stderr=str(exc))

        stdout, stderr = bytearray(), bytearray()
        readers = [
            asyncio.create_task(_drain(proc.stdout, stdout)),
            asyncio.create_task(_drain(proc.stderr, stderr)),
        ]

        timed_out = False
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._timeout)
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning("[tool_runner] %s exceeded %ss; killing process group %s", executable, self._timeout, proc.pid)
            _kill_tree(proc)
            await proc.wait()

        _, pending = await asyncio.wait(readers, timeout=KILL_GRACE_SECONDS)
        for task in pending:
            # a detached process outside the group still holds the pipe
            task.cancel()

        if timed_out:
            return ToolResult(
                termination=Termination.TIMED_OUT,
                stdout=_decode(stdout),
                stderr=_decode(stderr),
                timeout=self._timeout,
            )

        code = proc.returncode
        if code is not None and code < 0:
            return ToolResult(
                termination=Termination.SIGNALED,
                signal=-code,
                stdout=_decode(stdout),
                stderr=_decode(stderr),
            )
        if code is None:
            # wait() returned but no status was reported
            return ToolResult(termination=Termination.SIGNALED, stdout=_decode(stdout), stderr=_decode(stderr))
        return ToolResult(
            termination=Termination.EXITED,
            exit_code=code,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )
