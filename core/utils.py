# core/utils.py

from datetime import date
from decimal import Decimal


def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data before it is sent to PostgREST:
    - Empty strings → None
    - Strip string whitespace
    - Preserve booleans, numbers, None values
    - Dates / datetimes → ISO strings, Decimals → float
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        # datetime is a subclass of date
        if isinstance(v, date):
            clean[k] = v.isoformat()
            continue

        if isinstance(v, Decimal):
            clean[k] = float(v)
            continue

        # For other types, keep as-is
        clean[k] = v

    return clean


def paginate(rows: list, total: int, page: int, limit: int) -> dict:
    """Response envelope used by paginated list endpoints."""
    return {
        "data": rows,
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": -(-total // limit) if limit else 0,
        },
    }
