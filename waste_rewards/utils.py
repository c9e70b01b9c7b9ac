from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_date(value: datetime) -> str:
    """Calendar date of a timestamp, ``YYYY-MM-DD``, time of day dropped."""
    return value.date().isoformat()
