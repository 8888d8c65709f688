import math
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Query

from alumni.core.config import settings


def paginate(query: Query, page: int = 1, size: Optional[int] = None) -> Tuple[List[Any], dict]:
    """Apply offset/limit to ``query`` and build the pagination metadata."""
    size = min(size or settings.default_page_size, settings.max_page_size)
    total = query.order_by(None).count()

    offset = (page - 1) * size
    items = query.offset(offset).limit(size).all()

    pagination = {
        "total": total,
        "page": page,
        "size": size,
        "total_pages": math.ceil(total / size) if size > 0 else 0,
    }
    return items, pagination
