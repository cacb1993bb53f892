import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[3] / '.env')

DEFAULT_DATABASE_URL = 'sqlite+aiosqlite:///data/routes.db'
DEFAULT_AMAP_BASE_URL = 'https://restapi.amap.com/v3'


def getenv(key: str, default: str | None = None, required: bool = False):
    val = os.getenv(key, default)
    if required and val is None:
        raise RuntimeError(f'Missing env {key}')
    return val


def parse_accounts(raw: str | None) -> list[tuple[str, str]]:
    """解析 ``user:pass,user:pass`` 形式的账号列表。"""
    accounts = []
    for item in (raw or '').split(','):
        item = item.strip()
        if not item:
            continue
        username, sep, password = item.partition(':')
        if not sep or not username or not password:
            raise RuntimeError(f'Invalid account entry: {item!r}')
        accounts.append((username, password))
    return accounts


@dataclass
class Settings:
    """Runtime configuration for the route store and the Amap client."""

    database_url: str = DEFAULT_DATABASE_URL
    amap_api_key: str | None = None
    amap_base_url: str = DEFAULT_AMAP_BASE_URL
    amap_timeout: float = 10.0
    admin_username: str = 'admin'
    admin_password: str = 'admin123'
    bcrypt_rounds: int = 10
    viewer_accounts: list[tuple[str, str]] = field(default_factory=list)


def load_settings() -> Settings:
    """从环境变量（及 .env）构建配置。"""
    return Settings(
        database_url=getenv('ROUTELAB_DATABASE_URL', DEFAULT_DATABASE_URL),
        amap_api_key=getenv('AMAP_API_KEY'),
        amap_base_url=getenv('AMAP_BASE_URL', DEFAULT_AMAP_BASE_URL),
        amap_timeout=float(getenv('AMAP_TIMEOUT', '10')),
        admin_username=getenv('ROUTELAB_ADMIN_USERNAME', 'admin'),
        admin_password=getenv('ROUTELAB_ADMIN_PASSWORD', 'admin123'),
        bcrypt_rounds=int(getenv('ROUTELAB_BCRYPT_ROUNDS', '10')),
        viewer_accounts=parse_accounts(getenv('ROUTELAB_VIEWER_ACCOUNTS')),
    )
