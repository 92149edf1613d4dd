import math

from sqlalchemy.orm import Query

from .config import settings
from . import schemas


def clamp_page(page: int, limit: int) -> tuple[int, int]:
    page = max(1, page)
    limit = min(settings.page_size_max, max(1, limit))
    return page, limit


def paginate(query: Query, page: int, limit: int) -> tuple[list, schemas.Pagination]:
    """Run ``query`` for one page; the caller sets the ordering."""
    page, limit = clamp_page(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pagination = schemas.Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )
    return items, pagination
