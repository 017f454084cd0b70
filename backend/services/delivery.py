"""Stream rendered clips back to the caller and tear down their workspace."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from fastapi import BackgroundTasks
from fastapi.responses import StreamingResponse

from services.errors import ArtifactNotFoundError
from services.workspace import WorkspaceManager

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
VIDEO_MEDIA_TYPE = "video/mp4"
DEFAULT_DOWNLOAD_NAME = "output_1080x1920.mp4"


def open_artifact(path: Path | str) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as exc:
        raise ArtifactNotFoundError(f"Failed to create file stream: {exc}") from exc


class ArtifactFinalizer:
    """
    Deletes an artifact and then its workspace, at most once.

    Stream end, stream error and the response background task all call
    ``finalize``; whichever gets there first does the work.
    """

    def __init__(self, file_path: Path | str, workspace_path: Path | str | None, manager: WorkspaceManager) -> None:
        self._file = Path(file_path)
        self._workspace = Path(workspace_path) if workspace_path else None
        self._manager = manager
        self._lock = threading.Lock()
        self._done = False

    @property
    def finalized(self) -> bool:
        return self._done

    def finalize(self) -> None:
        with self._lock:
            if self._done:
                return
            self._done = True
        logger.info("[delivery] Cleaning up %s", self._file)
        self._manager.release_file(self._file)
        if self._workspace is not None:
            self._manager.release(self._workspace)


def iter_artifact(
    handle: BinaryIO,
    finalizer: ArtifactFinalizer | None = None,
    *,
    chunk_size: int = CHUNK_SIZE,
) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()
        if finalizer is not None:
            finalizer.finalize()


class ArtifactDelivery:
    def __init__(self, manager: WorkspaceManager, *, download_name: str = DEFAULT_DOWNLOAD_NAME) -> None:
        self._manager = manager
        self._download_name = download_name

    def open(self, path: Path | str) -> BinaryIO:
        """Open an artifact for reading; only files inside a managed workspace qualify."""
        if not self._manager.owns(path):
            raise ArtifactNotFoundError(f"Failed to create file stream: {path} is not a clip artifact")
        return open_artifact(path)

    def stream(
        self,
        file_path: Path | str,
        workspace_path: Path | str | None = None,
        *,
        cleanup: bool = False,
    ) -> StreamingResponse:
        handle = self.open(file_path)
        finalizer = None
        background = None
        if cleanup and workspace_path:
            finalizer = ArtifactFinalizer(file_path, self._safe_workspace(workspace_path), self._manager)
            background = BackgroundTasks()
            background.add_task(finalizer.finalize)
            logger.info("[delivery] Cleanup scheduled after download of %s", file_path)
        return StreamingResponse(
            iter_artifact(handle, finalizer),
            media_type=VIDEO_MEDIA_TYPE,
            headers={"content-disposition": f"attachment; filename={self._download_name}"},
            background=background,
        )

    def delete_explicit(self, file_path: Path | str, workspace_path: Path | str) -> None:
        """Synchronous best-effort teardown; never raises."""
        if self._manager.owns(file_path):
            self._manager.release_file(file_path)
        else:
            logger.warning("[delivery] Refusing to delete %s outside the workspace root", file_path)
        workspace = self._safe_workspace(workspace_path)
        if workspace is not None:
            self._manager.release(workspace)

    def _safe_workspace(self, workspace_path: Path | str) -> Path | None:
        if self._manager.owns(workspace_path):
            return Path(workspace_path)
        logger.warning("[delivery] Ignoring workspace %s outside the workspace root", workspace_path)
        return None
