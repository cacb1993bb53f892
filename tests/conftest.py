"""pytest配置文件"""

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from routelab.common.config import Settings
from routelab.routes.database import bootstrap


def pytest_addoption(parser):
    """添加命令行参数"""
    parser.addoption("--run-amap-tests", action="store_true", help="运行调用高德真实API的集成测试")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'data' / 'routes.db'}",
        bcrypt_rounds=4,
    )


@pytest.fixture
def with_db(settings):
    """在同一个事件循环中初始化数据库并执行 ``scenario(db)``。"""

    def runner(scenario):
        async def _main():
            db = await bootstrap(settings)
            try:
                return await scenario(db)
            finally:
                await db.close()

        return asyncio.run(_main())

    return runner


ROUTE_A = {
    "name": "A",
    "waypoints": [{"lng": 116.397, "lat": 39.909}, {"lng": 116.407, "lat": 39.919}],
    "start_lng": 116.397,
    "start_lat": 39.909,
    "end_lng": 116.407,
    "end_lat": 39.919,
}


@pytest.fixture
def route_fields():
    return dict(ROUTE_A)
