# a4blend/common.py
import math


def format_time(seconds):
    """Format elapsed seconds as ``MM:SS``.

    Unknown durations (None, NaN, inf) and negative values read ``00:00``.
    """
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return "00:00"
    if not math.isfinite(value) or value < 0:
        return "00:00"
    m, s = divmod(int(value), 60)
    return f"{m:02d}:{s:02d}"


def clamp(value, low=0.0, high=1.0):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return low
    if math.isnan(value):
        return low
    return max(low, min(high, value))
