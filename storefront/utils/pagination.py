# storefront/utils/pagination.py

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Query


def parse_page(raw: Optional[str]) -> int:
    """Page numbers below 1 or that do not parse as integers fall back to page 1."""
    try:
        page = int(raw) if raw is not None else 1
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


@dataclass
class Pagination:
    items: List[Any]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.last_page

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @property
    def start_result(self) -> int:
        return (self.page - 1) * self.per_page + 1

    @property
    def end_result(self) -> int:
        return min(self.page * self.per_page, self.total)

    def to_context(self) -> Dict[str, Any]:
        return {
            "current_page": self.page,
            "last_page": self.last_page,
            "has_next_page": self.has_next_page,
            "has_previous_page": self.has_previous_page,
            "next_page": self.page + 1,
            "previous_page": self.page - 1,
        }


def paginate(query: Query, page: int, per_page: int) -> Pagination:
    """
    Count the query, then fetch one page of it.

    The query must carry a total ordering, otherwise rows can repeat or go
    missing between pages. Pages past the end yield an empty ``items`` list.
    """
    total = query.order_by(None).count()
    offset = (page - 1) * per_page
    # Arbitrarily large page numbers would overflow the database integer
    items = query.offset(offset).limit(per_page).all() if offset < total else []
    return Pagination(items=items, total=total, page=page, per_page=per_page)
