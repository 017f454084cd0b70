"""Error taxonomy for the clip pipeline. Each error knows its HTTP status."""

STDERR_EXCERPT_CHARS = 500


class ClipError(Exception):
    status_code = 500

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class ValidationError(ClipError):
    status_code = 400


class WorkspaceError(ClipError):
    """The workspace directory could not be created."""


class ToolError(ClipError):
    """An external tool finished unsuccessfully."""


class RetrievalError(ToolError):
    pass


class TrimError(ToolError):
    pass


class RenderError(ToolError):
    pass


class ToolTimeoutError(ToolError):
    pass


class ArtifactNotFoundError(ClipError):
    pass


def stderr_excerpt(stderr: str, limit: int = STDERR_EXCERPT_CHARS) -> str:
    return stderr[:limit]
