from .config import ClipSettings, FetchMode
from .errors import ClipError, ValidationError
from .store import jobs

__all__ = ["jobs", "ClipSettings", "FetchMode", "ClipError", "ValidationError"]
