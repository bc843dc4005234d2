from datetime import timezone

from storefront.models.database import MAX_INTEGER


def parse_id(raw):
    """Parse a numeric path parameter, returning None when it is not a usable id."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    if not -MAX_INTEGER - 1 <= value <= MAX_INTEGER:
        return None
    return value


def money(value):
    return float(value) if value is not None else None


def timestamp(value):
    """Render a stored datetime as ISO 8601; naive values are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
