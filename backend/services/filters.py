"""ffmpeg filter graph for the vertical title-card render."""

# Characters with meaning inside a drawtext option value. Backslash goes first
# so escapes added for the others are not doubled.
_DRAWTEXT_SPECIAL = ("\\", ":", "'", '"')


def escape_drawtext(text: str) -> str:
    escaped = str(text)
    for ch in _DRAWTEXT_SPECIAL:
        escaped = escaped.replace(ch, "\\" + ch)
    return escaped


def build_vertical_filter(
    title: str,
    *,
    width: int = 1080,
    height: int = 1920,
    font_size: int = 64,
    text_y: int = 50,
) -> str:
    """
    Scale to the target height with Lanczos, fit inside width x height,
    pad to the exact frame and burn ``title`` centered near the top.
    Text expansion is off so "%" in a title is printed as-is.
    """
    text = escape_drawtext(title)
    return ",".join(
        [
            f"scale=-1:{height}:flags=lanczos",
            f"scale={width}:{height}:force_original_aspect_ratio=decrease",
            f"pad={width}:{height}:({width}-iw)/2:({height}-ih)/2",
            f"drawtext=text='{text}':expansion=none:fontcolor=white:fontsize={font_size}"
            f":x=(w-text_w)/2:y={text_y}:shadowx=2:shadowy=2",
        ]
    )
