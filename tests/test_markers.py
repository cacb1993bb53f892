"""标记点存储测试"""

import pytest

from routelab.common.exceptions import NotFoundError, ValidationError
from routelab.routes.markers import MarkerStore
from routelab.routes.store import RouteStore


def test_create_marker_with_defaults(with_db, route_fields):
    async def scenario(db):
        route = await RouteStore(db).create(route_fields)
        marker = await MarkerStore(db).create(route.id, {"lng": 116.4, "lat": 39.91, "name": "加油站"})
        return route, marker

    route, marker = with_db(scenario)
    assert marker.id is not None
    assert marker.route_id == route.id
    assert marker.marker_type == "important"
    assert marker.importance == 1
    assert marker.category == "other"
    assert marker.to_dict()["name"] == "加油站"


def test_create_marker_requires_fields(with_db, route_fields):
    async def scenario(db):
        route = await RouteStore(db).create(route_fields)
        with pytest.raises(ValidationError) as excinfo:
            await MarkerStore(db).create(route.id, {"lng": 116.4, "name": ""})
        return excinfo.value

    assert with_db(scenario).details["missing"] == ["lat", "name"]


def test_create_marker_requires_parent_route(with_db):
    async def scenario(db):
        markers = MarkerStore(db)
        with pytest.raises(NotFoundError):
            await markers.create(777, {"lng": 116.4, "lat": 39.9, "name": "孤立点"})
        return await markers.list_by_route(777)

    assert with_db(scenario) == []


def test_list_by_route_orders_by_importance_then_recency(with_db, route_fields):
    async def scenario(db):
        routes = RouteStore(db)
        markers = MarkerStore(db)
        route = await routes.create(route_fields)
        other = await routes.create(route_fields)
        await markers.create(route.id, {"lng": 116.40, "lat": 39.91, "name": "低-旧", "importance": 1})
        await markers.create(route.id, {"lng": 116.40, "lat": 39.91, "name": "高", "importance": 5})
        await markers.create(route.id, {"lng": 116.40, "lat": 39.91, "name": "低-新", "importance": 1})
        await markers.create(other.id, {"lng": 116.40, "lat": 39.91, "name": "其他路线"})
        return await markers.list_by_route(route.id)

    assert [m.name for m in with_db(scenario)] == ["高", "低-新", "低-旧"]


def test_update_marker_allow_list(with_db, route_fields):
    async def scenario(db):
        route = await RouteStore(db).create(route_fields)
        markers = MarkerStore(db)
        marker = await markers.create(route.id, {"lng": 116.4, "lat": 39.91, "name": "收费站"})
        result = await markers.update(
            marker.id, {"importance": 3, "image_url": "/uploads/a.png", "lng": 0, "route_id": 99}
        )
        with pytest.raises(ValidationError):
            await markers.update(marker.id, {"lng": 0})
        missing = await markers.update(9999, {"name": "x"})
        return result, missing, (await markers.list_by_route(route.id))[0]

    result, missing, marker = with_db(scenario)
    assert result.rows_affected == 1
    assert missing.rows_affected == 0
    assert marker.importance == 3
    assert marker.image_url == "/uploads/a.png"
    assert marker.lng == 116.4


@pytest.mark.parametrize("name", [None, ""])
def test_update_marker_cannot_clear_name(with_db, route_fields, name):
    async def scenario(db):
        route = await RouteStore(db).create(route_fields)
        markers = MarkerStore(db)
        marker = await markers.create(route.id, {"lng": 116.4, "lat": 39.91, "name": "收费站"})
        with pytest.raises(ValidationError) as excinfo:
            await markers.update(marker.id, {"name": name, "importance": 2})
        return excinfo.value, (await markers.list_by_route(route.id))[0]

    error, marker = with_db(scenario)
    assert error.details["invalid"] == ["name"]
    assert marker.name == "收费站"
    assert marker.importance == 1


def test_delete_marker(with_db, route_fields):
    async def scenario(db):
        route = await RouteStore(db).create(route_fields)
        markers = MarkerStore(db)
        marker = await markers.create(route.id, {"lng": 116.4, "lat": 39.91, "name": "服务区"})
        first = await markers.delete(marker.id)
        second = await markers.delete(marker.id)
        return first, second, await markers.list_by_route(route.id)

    first, second, remaining = with_db(scenario)
    assert first.rows_affected == 1
    assert second.rows_affected == 0
    assert remaining == []


def test_route_delete_cascades_to_markers(with_db, route_fields):
    async def scenario(db):
        routes = RouteStore(db)
        markers = MarkerStore(db)
        route = await routes.create(route_fields)
        kept = await routes.create(route_fields)
        for index in range(3):
            await markers.create(route.id, {"lng": 116.4, "lat": 39.91, "name": f"点{index}"})
        await markers.create(kept.id, {"lng": 116.4, "lat": 39.91, "name": "保留"})

        before = await markers.list_by_route(route.id)
        await routes.delete(route.id)
        return before, await markers.list_by_route(route.id), await markers.list_by_route(kept.id)

    before, after, kept = with_db(scenario)
    assert len(before) == 3
    assert after == []
    assert [m.name for m in kept] == ["保留"]
