"""
Route store: CRUD and aggregate statistics over the ``routes`` table.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import delete, func, select, update

from ..common.exceptions import NotFoundError, ValidationError
from .database import RouteDatabase
from .models import Route, utcnow
from .types import WriteResult

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    """JSON 字段既接受结构化数据，也接受 JSON 文本。"""
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(f"JSON 字段格式错误: {e}", details={"value": value})
    return value


def _as_is(value: Any) -> Any:
    return value


ROUTE_DEFAULTS: Dict[str, Any] = {
    "description": "",
    "route_type": "driving",
    "city": "",
    "district": "",
    "district_type": "区",
    "intersections": 0,
    "right_turns": 0,
    "left_turns": 0,
    "u_turns": 0,
    "roundabouts": 0,
    "special_traffic_lights": 0,
    "special_intersections": 0,
    "distance": 0,
    "duration": 0,
    "polyline": [],
    "steps": [],
    "tolls": 0,
    "traffic_lights": 0,
    "created_by": "system",
}

ROUTE_REQUIRED_FIELDS = ("name", "waypoints", "start_lng", "start_lat", "end_lng", "end_lat")

# 可更新字段 -> 取值转换
ROUTE_UPDATABLE_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "name": _as_is,
    "description": _as_is,
    "route_type": _as_is,
    "city": _as_is,
    "district": _as_is,
    "district_type": _as_is,
    "intersections": _as_is,
    "right_turns": _as_is,
    "left_turns": _as_is,
    "u_turns": _as_is,
    "roundabouts": _as_is,
    "special_traffic_lights": _as_is,
    "special_intersections": _as_is,
    "created_by": _as_is,
    "start_lng": _as_is,
    "start_lat": _as_is,
    "end_lng": _as_is,
    "end_lat": _as_is,
    "waypoints": _json_value,
    "distance": _as_is,
    "duration": _as_is,
    "polyline": _json_value,
    "steps": _json_value,
    "tolls": _as_is,
    "traffic_lights": _as_is,
}

ROUTE_FIELD_ALIASES = {"creator": "created_by"}

_JSON_FIELDS = {name for name, setter in ROUTE_UPDATABLE_FIELDS.items() if setter is _json_value}


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def build_update_values(
    fields: Mapping[str, Any],
    allowed: Mapping[str, Callable[[Any], Any]],
    aliases: Optional[Mapping[str, str]] = None,
    required: Sequence[str] = (),
) -> Dict[str, Any]:
    """
    Intersect ``fields`` with the allow-list and convert the surviving values.

    Unknown keys are dropped silently. Raises ValidationError when nothing is left
    or when a ``required`` column would be cleared to None or "".
    """
    aliases = aliases or {}
    values: Dict[str, Any] = {}
    invalid = []
    for key, value in fields.items():
        column = aliases.get(key, key)
        setter = allowed.get(column)
        if setter is None:
            continue
        if column in required and (value is None or value == ""):
            invalid.append(column)
            continue
        values[column] = setter(value)

    if invalid:
        raise ValidationError(f"必填字段不能为空: {', '.join(invalid)}", details={"invalid": invalid})
    if not values:
        raise ValidationError("没有有效的更新字段", details={"received": sorted(fields)})
    return values


def check_page(page: int, page_size: int):
    if page < 1 or page_size < 1:
        raise ValidationError("page 和 page_size 必须为正整数", details={"page": page, "page_size": page_size})


class RouteStore:
    """Persistence operations for routes."""

    def __init__(self, db: RouteDatabase):
        self.db = db

    async def create(self, fields: Mapping[str, Any]) -> Route:
        """
        Persist a new route.

        Args:
            fields: route columns; ``waypoints``, ``steps`` and ``polyline`` may be
                structured values or JSON text

        Raises:
            ValidationError: if any required field is missing
        """
        missing = [name for name in ROUTE_REQUIRED_FIELDS if _is_missing(fields.get(name))]
        if missing:
            raise ValidationError(f"缺少必填字段: {', '.join(missing)}", details={"missing": missing})

        data = dict(ROUTE_DEFAULTS)
        for key, value in fields.items():
            column = ROUTE_FIELD_ALIASES.get(key, key)
            if column in ROUTE_UPDATABLE_FIELDS and value is not None:
                data[column] = ROUTE_UPDATABLE_FIELDS[column](value)

        now = utcnow()
        route = Route(**data, created_at=now, updated_at=now)
        async with self.db.session() as session:
            session.add(route)
            await session.flush()
        logger.info(f"路线保存成功: id={route.id}, name={route.name}")
        return route

    async def get_by_id(self, route_id: int) -> Route:
        async with self.db.session() as session:
            route = await session.get(Route, route_id)
        if route is None:
            raise NotFoundError("route", route_id)
        return route

    async def list_routes(
        self,
        page: int = 1,
        page_size: int = 20,
        route_type: Optional[str] = None,
        name_contains: Optional[str] = None,
    ) -> List[Route]:
        """
        List routes newest first.

        The result holds only the requested page; use ``statistics`` or the
        search engine when a total count is needed.
        """
        check_page(page, page_size)
        query = select(Route)
        if route_type:
            query = query.where(Route.route_type == route_type)
        if name_contains:
            query = query.where(Route.name.contains(name_contains, autoescape=True))
        query = (
            query.order_by(Route.created_at.desc(), Route.id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )

        async with self.db.session() as session:
            return list((await session.execute(query)).scalars().all())

    async def update(self, route_id: int, fields: Mapping[str, Any]) -> WriteResult:
        """Apply allow-listed fields; ``rows_affected`` is 0 when the id does not exist."""
        values = build_update_values(
            fields, ROUTE_UPDATABLE_FIELDS, ROUTE_FIELD_ALIASES, required=ROUTE_REQUIRED_FIELDS
        )
        for name in _JSON_FIELDS & values.keys():
            if values[name] is None:
                values[name] = []
        values["updated_at"] = utcnow()

        stmt = (
            update(Route)
            .where(Route.id == route_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
        logger.info(f"更新路线: id={route_id}, fields={sorted(values)}, rows={result.rowcount}")
        return WriteResult(id=route_id, rows_affected=result.rowcount)

    async def delete(self, route_id: int) -> WriteResult:
        """Delete a route; its markers go with it through the foreign key cascade."""
        stmt = delete(Route).where(Route.id == route_id).execution_options(synchronize_session=False)
        async with self.db.session() as session:
            result = await session.execute(stmt)
        logger.info(f"删除路线: id={route_id}, rows={result.rowcount}")
        return WriteResult(id=route_id, rows_affected=result.rowcount)

    async def statistics(self) -> List[Dict[str, Any]]:
        query = (
            select(
                Route.route_type,
                func.count(Route.id).label("count"),
                func.sum(Route.distance).label("total_distance"),
                func.avg(Route.distance).label("avg_distance"),
            )
            .group_by(Route.route_type)
            .order_by(Route.route_type)
        )
        async with self.db.session() as session:
            rows = (await session.execute(query)).mappings().all()
        return [
            {
                "route_type": row["route_type"],
                "count": row["count"],
                "total_distance": row["total_distance"] or 0,
                "avg_distance": row["avg_distance"] or 0,
            }
            for row in rows
        ]
