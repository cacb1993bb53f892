"""路线搜索测试"""

import pytest

from routelab.common.exceptions import ValidationError
from routelab.routes.search import RouteSearch
from routelab.routes.store import RouteStore


async def seed(db, route_fields):
    store = RouteStore(db)
    await store.create(dict(route_fields, name="朝阳通勤", city="北京", district="朝阳"))
    await store.create(dict(route_fields, name="海淀环线", description="经过朝阳公园", city="北京", district="海淀"))
    await store.create(dict(route_fields, name="浦东机场", city="上海", district="浦东"))
    await store.create(dict(route_fields, name="测试线路", created_by="朝阳规划组"))
    await store.create(dict(route_fields, name="100%_达标"))


def test_keyword_matches_any_column(with_db, route_fields):
    async def scenario(db):
        await seed(db, route_fields)
        return await RouteSearch(db).search("朝阳")

    result = with_db(scenario)
    assert result.total == 3
    assert [r.name for r in result.routes] == ["测试线路", "海淀环线", "朝阳通勤"]


def test_keyword_is_trimmed_and_literal(with_db, route_fields):
    async def scenario(db):
        await seed(db, route_fields)
        search = RouteSearch(db)
        return await search.search("  上海 "), await search.search("%_"), await search.search("%")

    trimmed, literal, percent = with_db(scenario)
    assert [r.name for r in trimmed.routes] == ["浦东机场"]
    assert literal.total == 1
    assert percent.total == 1


@pytest.mark.parametrize("keyword", ["", "   ", None])
def test_blank_keyword_matches_everything(with_db, route_fields, keyword):
    async def scenario(db):
        await seed(db, route_fields)
        return await RouteSearch(db).search(keyword, page=1, page_size=2)

    result = with_db(scenario)
    assert result.total == 5
    assert len(result.routes) == 2


@pytest.mark.parametrize("page_size", [1, 2, 3, 10])
def test_pages_add_up_to_total(with_db, route_fields, page_size):
    async def scenario(db):
        await seed(db, route_fields)
        search = RouteSearch(db)
        first = await search.search("", page=1, page_size=page_size)
        pages = []
        page = 1
        while True:
            result = await search.search("", page=page, page_size=page_size)
            if not result.routes:
                return first, pages, result
            pages.append(result)
            page += 1

    first, pages, beyond = with_db(scenario)
    assert sum(len(p.routes) for p in pages) == first.total == 5
    assert all(p.total == 5 for p in pages)
    assert beyond.routes == []
    assert beyond.total == 5
    names = [r.name for p in pages for r in p.routes]
    assert len(set(names)) == 5


def test_no_match_skips_data_query(with_db, route_fields):
    async def scenario(db):
        await seed(db, route_fields)
        statements = []

        from sqlalchemy import event

        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(db.engine.sync_engine, "before_cursor_execute", record)
        result = await RouteSearch(db).search("不存在的关键词", page=3, page_size=7)
        event.remove(db.engine.sync_engine, "before_cursor_execute", record)
        return result, statements

    result, statements = with_db(scenario)
    assert result.routes == []
    assert result.total == 0
    assert (result.page, result.page_size) == (3, 7)
    selects = [s for s in statements if s.lstrip().upper().startswith("SELECT")]
    assert len(selects) == 1
    assert "count(" in selects[0].lower()


def test_search_rejects_bad_paging(with_db):
    async def scenario(db):
        with pytest.raises(ValidationError):
            await RouteSearch(db).search("x", page=1, page_size=0)

    with_db(scenario)


def test_search_result_to_dict(with_db, route_fields):
    async def scenario(db):
        await seed(db, route_fields)
        return (await RouteSearch(db).search("浦东")).to_dict()

    data = with_db(scenario)
    assert data["total"] == 1
    assert data["routes"][0]["city"] == "上海"
