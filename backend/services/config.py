"""Runtime configuration for the clip pipeline, read from the environment."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FetchMode(str, Enum):
    SECTIONS = "sections"   # yt-dlp downloads only the requested range
    FULL = "full"           # yt-dlp downloads everything, ffmpeg trims


DEFAULT_TOOL_TIMEOUT_SECONDS = 900.0
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_timeout(name: str, default: float | None) -> float | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    value = float(raw)
    # 0 or negative disables the timeout
    return value if value > 0 else None


@dataclass(frozen=True)
class ClipSettings:
    workspace_root: Path | None = None
    workspace_prefix: str = "ytclip-"
    fetch_mode: FetchMode = FetchMode.SECTIONS
    cleanup_on_failure: bool = False
    tool_timeout: float | None = DEFAULT_TOOL_TIMEOUT_SECONDS
    retrieval_attempts: int = 1
    ytdlp_bin: str = "yt-dlp"
    ffmpeg_bin: str = "ffmpeg"
    format_selector: str = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4"
    width: int = 1080
    height: int = 1920
    font_size: int = 64
    video_preset: str = "veryfast"
    video_crf: int = 20
    audio_bitrate: str = "128k"
    download_filename: str = "output_1080x1920.mp4"

    def __post_init__(self) -> None:
        if self.retrieval_attempts < 1:
            raise ValueError("retrieval_attempts must be >= 1")

    @classmethod
    def from_env(cls) -> "ClipSettings":
        root = os.environ.get("CLIP_WORKSPACE_ROOT", "").strip()
        return cls(
            workspace_root=Path(root) if root else None,
            fetch_mode=FetchMode(os.environ.get("CLIP_FETCH_MODE", FetchMode.SECTIONS.value).strip().lower()),
            cleanup_on_failure=_env_bool("CLIP_CLEANUP_ON_FAILURE", False),
            tool_timeout=_env_timeout("CLIP_TOOL_TIMEOUT_SECONDS", DEFAULT_TOOL_TIMEOUT_SECONDS),
            retrieval_attempts=int(os.environ.get("CLIP_RETRIEVAL_ATTEMPTS", "1")),
            ytdlp_bin=os.environ.get("YTDLP_BIN", "").strip() or "yt-dlp",
            ffmpeg_bin=os.environ.get("FFMPEG_BIN", "").strip() or "ffmpeg",
        )
