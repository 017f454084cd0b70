"""Request validation. Pure: runs before any workspace or process exists."""

import math
from typing import Any

from models import ClipRequest
from services.errors import ValidationError

MISSING_FIELDS_MESSAGE = "Missing required fields: url, start, end, title"


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _seconds(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number of seconds, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number of seconds, got {value!r}") from None


def validate_request(
    url: Any,
    start: Any,
    end: Any,
    title: Any,
    *,
    start_label: str | None = None,
    end_label: str | None = None,
) -> ClipRequest:
    if _missing(url) or _missing(start) or _missing(end) or _missing(title):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    start_s = _seconds("start", start)
    end_s = _seconds("end", end)
    duration = end_s - start_s
    if not math.isfinite(duration) or duration <= 0:
        raise ValidationError(
            f"Invalid time range: start={start}s, end={end}s, duration={duration}s"
        )
    if start_s < 0:
        raise ValidationError(f"Invalid time range: start={start}s must not be negative")
    # "-0" parses as -0.0, which would format as a negative (from-the-end) offset
    start_s += 0.0

    return ClipRequest(
        source_url=str(url).strip(),
        start=start_s,
        end=end_s,
        title=str(title),
        start_label=start_label,
        end_label=end_label,
    )
