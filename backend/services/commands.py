"""Argument lists for yt-dlp and ffmpeg."""

from pathlib import Path

DEFAULT_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4"


def format_seconds(value: float) -> str:
    """30.0 -> "30", 12.5 -> "12.5"."""
    text = f"{float(value):.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def download_section(start: float, end: float) -> str:
    return f"*{format_seconds(start)}-{format_seconds(end)}"


def fetch_args(
    url: str,
    output: Path | str,
    *,
    section: tuple[float, float] | None = None,
    format_selector: str = DEFAULT_FORMAT,
) -> list[str]:
    args = [url, "-f", format_selector]
    if section is not None:
        args += ["--download-sections", download_section(*section)]
    args += ["-o", str(output)]
    return args


def trim_args(input_path: Path | str, output: Path | str, *, start: float, duration: float) -> list[str]:
    return [
        "-y",
        "-ss",
        format_seconds(start),
        "-i",
        str(input_path),
        "-t",
        format_seconds(duration),
        "-c",
        "copy",
        str(output),
    ]


def render_args(
    input_path: Path | str,
    output: Path | str,
    *,
    video_filter: str,
    preset: str = "veryfast",
    crf: int = 20,
    audio_bitrate: str = "128k",
) -> list[str]:
    return [
        "-y",
        "-i",
        str(input_path),
        "-vf",
        video_filter,
        "-c:v",
        "libx264",
        "-preset",
        preset,
        "-crf",
        str(crf),
        "-c:a",
        "aac",
        "-b:a",
        audio_bitrate,
        str(output),
    ]
