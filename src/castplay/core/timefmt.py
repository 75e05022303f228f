"""Human-readable clock strings for progress labels."""

import math

_SECONDS_PER_MINUTE = 60
_SECONDS_PER_HOUR = 3600


def format_clock(seconds: float | None) -> str:
    """Format a position or duration as ``m:ss`` or ``h:mm:ss``.

    Args:
        seconds: Time in seconds. None, NaN, infinite and negative values
            render as ``0:00``.

    Returns:
        Clock string, e.g. ``"2:05"`` or ``"1:02:05"``.
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "0:00"
    total = int(seconds)
    hours, remainder = divmod(total, _SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, _SECONDS_PER_MINUTE)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
