"""
Database handle for route management.

``RouteDatabase`` is created once during bootstrap and passed to every store.
Until ``init_db`` has finished (tables created, administrator provisioned) the
handle refuses to hand out sessions.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..common.config import Settings, load_settings
from ..common.exceptions import StoreUnavailableError
from .models import Base
from .users import ensure_admin_user, ensure_read_only_users

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record):
    # SQLite 默认不执行外键约束，级联删除依赖此设置
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class RouteDatabase:
    """Database handler for route management."""

    def __init__(self, connection_string: str, settings: Optional[Settings] = None):
        """
        Initialize database connection.

        Args:
            connection_string: SQLAlchemy async connection string
                (e.g. ``sqlite+aiosqlite:///data/routes.db``)
            settings: configuration used for seeding accounts
        """
        self.settings = settings or Settings(database_url=connection_string)
        url = make_url(connection_string)
        if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
            # 确保数据目录存在
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_async_engine(connection_string)
        if url.get_backend_name() == 'sqlite':
            event.listen(self.engine.sync_engine, 'connect', _enable_foreign_keys)
        self.Session = async_sessionmaker(self.engine, expire_on_commit=False)
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    async def init_db(self):
        """Create all tables if they don't exist and provision default accounts."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("所有数据表初始化完成: routes, route_markers, users")

        async with self.Session() as session:
            async with session.begin():
                await ensure_admin_user(
                    session,
                    self.settings.admin_username,
                    self.settings.admin_password,
                    rounds=self.settings.bcrypt_rounds,
                )
                if self.settings.viewer_accounts:
                    await ensure_read_only_users(
                        session,
                        self.settings.viewer_accounts,
                        rounds=self.settings.bcrypt_rounds,
                    )
        self._ready = True
        logger.info("数据库初始化完成")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session wrapped in a transaction.

        Raises:
            StoreUnavailableError: if the handle is not initialized or already closed
        """
        if not self._ready:
            raise StoreUnavailableError()
        async with self.Session() as session:
            async with session.begin():
                yield session

    async def close(self):
        self._ready = False
        await self.engine.dispose()
        logger.info("数据库连接已关闭")


async def bootstrap(settings: Optional[Settings] = None) -> RouteDatabase:
    """Build the store handle from configuration and initialize it."""
    settings = settings or load_settings()
    db = RouteDatabase(settings.database_url, settings)
    await db.init_db()
    return db
