"""数据库初始化与账号测试"""

import asyncio

import pytest
from sqlalchemy import inspect, select

from routelab.common.config import Settings, parse_accounts
from routelab.common.exceptions import StoreUnavailableError
from routelab.routes.database import RouteDatabase, bootstrap
from routelab.routes.models import User
from routelab.routes.search import RouteSearch
from routelab.routes.store import RouteStore
from routelab.routes.users import authenticate


def test_bootstrap_creates_tables_and_admin(with_db):
    async def scenario(db):
        async with db.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        async with db.session() as session:
            users = (await session.execute(select(User))).scalars().all()
            admin = await authenticate(session, "admin", "admin123")
            wrong = await authenticate(session, "admin", "wrong")
            unknown = await authenticate(session, "nobody", "admin123")
        return tables, users, admin, wrong, unknown

    tables, users, admin, wrong, unknown = with_db(scenario)
    assert {"routes", "route_markers", "users"} <= set(tables)
    assert [u.username for u in users] == ["admin"]
    assert admin is not None and admin.is_admin is True
    assert wrong is None
    assert unknown is None


def test_bootstrap_is_idempotent(settings):
    settings.viewer_accounts = [("viewer1", "view123"), ("viewer2", "view456")]

    async def scenario():
        first = await bootstrap(settings)
        await first.close()
        second = await bootstrap(settings)
        try:
            async with second.session() as session:
                users = (await session.execute(select(User).order_by(User.username))).scalars().all()
                viewer = await authenticate(session, "viewer1", "view123")
            return users, viewer
        finally:
            await second.close()

    users, viewer = asyncio.run(scenario())
    assert [(u.username, u.is_admin) for u in users] == [("admin", True), ("viewer1", False), ("viewer2", False)]
    assert viewer is not None


def test_store_not_ready_before_bootstrap(settings, route_fields):
    async def scenario():
        db = RouteDatabase(settings.database_url, settings)
        try:
            with pytest.raises(StoreUnavailableError):
                await RouteStore(db).create(route_fields)
            with pytest.raises(StoreUnavailableError):
                await RouteSearch(db).search("")
        finally:
            await db.close()

    asyncio.run(scenario())


def test_store_unavailable_after_close(settings):
    async def scenario():
        db = await bootstrap(settings)
        await db.close()
        assert db.ready is False
        with pytest.raises(StoreUnavailableError) as excinfo:
            await RouteStore(db).list_routes()
        return excinfo.value

    error = asyncio.run(scenario())
    assert error.status_code == 503
    assert error.to_dict()["error_code"] == "STORE_UNAVAILABLE"


def test_parse_accounts():
    assert parse_accounts("viewer1:view123, viewer2:view456,") == [("viewer1", "view123"), ("viewer2", "view456")]
    assert parse_accounts(None) == []
    with pytest.raises(RuntimeError):
        parse_accounts("viewer-without-password")


def test_data_directory_is_created(tmp_path):
    target = tmp_path / "nested" / "dir" / "routes.db"
    settings = Settings(database_url=f"sqlite+aiosqlite:///{target}", bcrypt_rounds=4)

    async def scenario():
        db = await bootstrap(settings)
        await db.close()

    asyncio.run(scenario())
    assert target.exists()
