"""
重要标记点的数据库操作
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

from sqlalchemy import delete, select, update

from ..common.exceptions import NotFoundError, ValidationError
from .database import RouteDatabase
from .models import Route, RouteMarker, utcnow
from .store import build_update_values
from .types import WriteResult

logger = logging.getLogger(__name__)

MARKER_DEFAULTS: Dict[str, Any] = {
    "marker_type": "important",
    "description": "",
    "image_url": "",
    "contact": "",
    "importance": 1,
    "category": "other",
}

MARKER_REQUIRED_FIELDS = ("lng", "lat", "name")

MARKER_UPDATABLE_FIELDS: Dict[str, Callable[[Any], Any]] = {
    name: (lambda value: value)
    for name in ("name", "description", "image_url", "contact", "importance", "category", "marker_type")
}


class MarkerStore:
    """Persistence operations for markers attached to a route."""

    def __init__(self, db: RouteDatabase):
        self.db = db

    async def create(self, route_id: int, fields: Mapping[str, Any]) -> RouteMarker:
        """
        保存标记点

        Raises:
            ValidationError: 缺少经纬度或名称
            NotFoundError: 所属路线不存在
        """
        missing = [name for name in MARKER_REQUIRED_FIELDS if fields.get(name) is None or fields.get(name) == ""]
        if missing:
            raise ValidationError(f"经纬度和名称为必填字段，缺少: {', '.join(missing)}", details={"missing": missing})

        data = dict(MARKER_DEFAULTS)
        data.update({key: value for key, value in fields.items() if key in MARKER_UPDATABLE_FIELDS and value is not None})
        marker = RouteMarker(
            route_id=route_id,
            lng=fields["lng"],
            lat=fields["lat"],
            created_at=utcnow(),
            **data,
        )

        async with self.db.session() as session:
            if await session.get(Route, route_id) is None:
                raise NotFoundError("route", route_id)
            session.add(marker)
            await session.flush()
        logger.info(f"标记点保存成功: id={marker.id}, route_id={route_id}, name={marker.name}")
        return marker

    async def list_by_route(self, route_id: int) -> List[RouteMarker]:
        query = (
            select(RouteMarker)
            .where(RouteMarker.route_id == route_id)
            .order_by(RouteMarker.importance.desc(), RouteMarker.created_at.desc(), RouteMarker.id.desc())
        )
        async with self.db.session() as session:
            return list((await session.execute(query)).scalars().all())

    async def update(self, marker_id: int, fields: Mapping[str, Any]) -> WriteResult:
        values = build_update_values(fields, MARKER_UPDATABLE_FIELDS, required=("name",))
        stmt = (
            update(RouteMarker)
            .where(RouteMarker.id == marker_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
        logger.info(f"更新标记点: id={marker_id}, fields={sorted(values)}, rows={result.rowcount}")
        return WriteResult(id=marker_id, rows_affected=result.rowcount)

    async def delete(self, marker_id: int) -> WriteResult:
        stmt = delete(RouteMarker).where(RouteMarker.id == marker_id).execution_options(synchronize_session=False)
        async with self.db.session() as session:
            result = await session.execute(stmt)
        logger.info(f"删除标记点: id={marker_id}, rows={result.rowcount}")
        return WriteResult(id=marker_id, rows_affected=result.rowcount)
