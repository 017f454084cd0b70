"""Per-job temporary workspaces: allocation and best-effort teardown."""

import logging
import shutil
import tempfile
from pathlib import Path

from services.errors import WorkspaceError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "ytclip-"


class WorkspaceManager:
    """
    Hands out one uniquely named directory per job under ``root``.

    Release operations never raise: a missing path is a no-op and any other
    filesystem failure is logged, so teardown can run any number of times.
    """

    def __init__(self, root: Path | str | None = None, *, prefix: str = DEFAULT_PREFIX) -> None:
        self._root = Path(root) if root is not None else Path(tempfile.gettempdir())
        self._prefix = prefix

    @property
    def root(self) -> Path:
        return self._root

    def allocate(self) -> Path:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            path = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._root))
        except OSError as exc:
            raise WorkspaceError(f"Could not create workspace under {self._root}: {exc}") from exc
        logger.info("[workspace] Allocated %s", path)
        return path

    def owns(self, path: Path | str) -> bool:
        """True when ``path`` sits inside one of this manager's workspaces."""
        try:
            resolved = Path(path).resolve()
            root = self._root.resolve()
        except OSError:
            return False
        if resolved == root or root not in resolved.parents:
            return False
        workspace = resolved.relative_to(root).parts[0]
        return workspace.startswith(self._prefix)

    def release(self, path: Path | str) -> None:
        target = Path(path)
        try:
            shutil.rmtree(target)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("[workspace] Could not delete workspace %s: %s", target, exc)
            return
        logger.info("[workspace] Deleted workspace %s", target)

    def release_file(self, path: Path | str) -> None:
        target = Path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("[workspace] Could not delete file %s: %s", target, exc)
            return
        logger.info("[workspace] Deleted file %s", target)
