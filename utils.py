from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp, matching what the SQLite DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value):
    """Parse an ISO 8601 string (``Z`` suffix allowed) into a naive UTC datetime."""
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def isoformat(value):
    return value.isoformat() if value else None
