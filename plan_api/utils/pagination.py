import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo import ASCENDING

DEFAULT_SORT: Sequence[Tuple[str, int]] = (("_id", ASCENDING),)


@dataclass
class Page:
    """One page of a collection query. Page numbers start at 1."""

    docs: List[Dict[str, Any]] = field(default_factory=list)
    total_docs: int = 0
    limit: int = 0
    page: int = 1
    total_pages: int = 1

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def prev_page(self) -> Optional[int]:
        return self.page - 1 if self.has_prev_page else None

    @property
    def next_page(self) -> Optional[int]:
        return self.page + 1 if self.has_next_page else None


async def paginate(
    collection,
    filters: Dict[str, Any],
    *,
    page: int,
    limit: int,
    sort: Sequence[Tuple[str, int]] = DEFAULT_SORT,
) -> Page:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")

    total_docs = await collection.count_documents(filters)
    cursor = (
        collection.find(filters)
        .sort(list(sort))
        .skip((page - 1) * limit)
        .limit(limit)
    )
    docs = await cursor.to_list(length=limit)

    return Page(
        docs=docs,
        total_docs=total_docs,
        limit=limit,
        page=page,
        total_pages=math.ceil(total_docs / limit) or 1,
    )
