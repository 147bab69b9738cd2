"""Shared utility functions for Time Capsule."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date(value: str) -> datetime:
    """Parse a user-entered date string as a UTC timestamp.

    Accepts ``YYYY-MM-DD``, ``YYYY-MM-DD HH:MM`` and ``YYYY-MM-DD HH:MM:SS``
    (a ``T`` separator works too).

    Raises:
        ValueError: If no format matches.
    """
    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ValueError("Invalid date format. Use: YYYY-MM-DD or 'YYYY-MM-DD HH:MM:SS'")


def format_duration(duration: timedelta) -> str:
    """Render a duration as days, hours and minutes."""
    total_minutes = max(int(duration.total_seconds() // 60), 0)
    days, rest = divmod(total_minutes, 60 * 24)
    hours, minutes = divmod(rest, 60)

    if days > 0:
        return f"{days} days, {hours} hours, {minutes} minutes"
    if hours > 0:
        return f"{hours} hours, {minutes} minutes"
    return f"{minutes} minutes"


def get_unique_path(dest: Path) -> Path:
    """Get a unique path by appending a counter if the file already exists.

    Args:
        dest: The desired destination path

    Returns:
        The original path if it doesn't exist, or a path with a counter suffix
    """
    if not dest.exists():
        return dest

    stem = dest.stem
    suffix = dest.suffix
    parent = dest.parent
    counter = 1

    while dest.exists():
        dest = parent / f"{stem}_{counter}{suffix}"
        counter += 1

    return dest
