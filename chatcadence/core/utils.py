"""
Time helpers shared by the segmentation phases.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Union

TimestampLike = Union[str, int, float, datetime]


def to_utc(dt: datetime) -> datetime:
    """
    Return ``dt`` as an aware UTC datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: TimestampLike) -> datetime:
    """
    Parse an ISO-8601 string, epoch seconds or datetime into a UTC datetime.

    Parameters
    ----------
    value : str, int, float or datetime
        Timestamp to parse. A trailing ``Z`` is accepted on strings.

    Returns
    -------
    datetime
        Aware datetime in UTC

    Raises
    ------
    ValueError
        If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    raise ValueError(f"Invalid timestamp: {value!r}")


def iso_utc(dt: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``, the form used in volley ids."""
    return to_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def gap_seconds(earlier: datetime, later: datetime) -> float:
    """Absolute difference between two datetimes, in seconds."""
    return abs((later - earlier).total_seconds())


def compute_gaps(times: Iterable[datetime]) -> List[float]:
    """
    Gaps in seconds between each pair of adjacent datetimes.

    ``n`` datetimes produce ``n - 1`` gaps; fewer than two produce none.
    """
    gaps: List[float] = []
    previous = None
    for current in times:
        if previous is not None:
            gaps.append(gap_seconds(previous, current))
        previous = current
    return gaps


def format_duration(seconds: float) -> str:
    """
    Convert a duration to a short human-readable string.

    - under a minute: ``45s``
    - under an hour: ``12m``
    - under a day: ``3h``
    - otherwise: ``2d``
    """
    if seconds < 60:
        return f"{round(seconds)}s"
    elif seconds < 3600:
        return f"{round(seconds / 60)}m"
    elif seconds < 86400:
        return f"{round(seconds / 3600)}h"
    else:
        return f"{round(seconds / 86400)}d"
