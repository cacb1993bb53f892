"""
Keyword search over routes.

The total is always computed by a COUNT under the same predicate as the data
query; the page itself is fetched only when that total is non-zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import func, or_, select

from .database import RouteDatabase
from .models import Route
from .store import check_page

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = (Route.name, Route.description, Route.city, Route.district, Route.created_by)


@dataclass
class SearchResult:
    routes: List[Route] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20

    def to_dict(self) -> dict:
        return {
            "routes": [route.to_dict() for route in self.routes],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
        }


def keyword_predicate(keyword: str):
    """OR of a literal substring match on every searchable column; None matches all."""
    keyword = (keyword or "").strip()
    if not keyword:
        return None
    return or_(*(column.contains(keyword, autoescape=True) for column in SEARCH_COLUMNS))


class RouteSearch:
    def __init__(self, db: RouteDatabase):
        self.db = db

    async def search(self, keyword: str = "", page: int = 1, page_size: int = 20) -> SearchResult:
        check_page(page, page_size)
        predicate = keyword_predicate(keyword)

        count_query = select(func.count()).select_from(Route)
        data_query = select(Route)
        if predicate is not None:
            count_query = count_query.where(predicate)
            data_query = data_query.where(predicate)
        data_query = (
            data_query.order_by(Route.created_at.desc(), Route.id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )

        async with self.db.session() as session:
            total = (await session.execute(count_query)).scalar_one() or 0
            logger.info(f"搜索路线: keyword={keyword!r}, total={total}")
            if total == 0:
                return SearchResult(routes=[], total=0, page=page, page_size=page_size)
            routes = list((await session.execute(data_query)).scalars().all())

        logger.info(f"搜索完成: page={page}, 返回 {len(routes)} 条记录")
        return SearchResult(routes=routes, total=total, page=page, page_size=page_size)
