class DatabaseError(Exception):
    """Custom exception for database operations."""
    pass


def describe_value(value: str, limit: int = 40) -> str:
    """Short preview of a stored value for log lines."""
    if len(value) <= limit:
        return repr(value)
    return f"{value[:limit]!r}... ({len(value)} chars)"
