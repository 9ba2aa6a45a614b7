from sqlalchemy.orm import Query


def paginate(query: Query, page: int, limit: int):
    """Return ``(items, total)`` for a 1-based page."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total


def search_pattern(term: str) -> str:
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
