"""
用户账号初始化与凭据校验
"""

import logging
from typing import Dict, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.security import hash_password, verify_password
from .models import User

logger = logging.getLogger(__name__)


async def ensure_admin_user(session: AsyncSession, username: str, password: str, rounds: int = 10) -> User:
    """检查并创建管理员账号；已存在时保持原样。"""
    existing = (await session.execute(select(User).where(User.username == username))).scalar_one_or_none()
    if existing is not None:
        logger.info(f"管理员用户已存在: {username}")
        return existing

    admin = User(username=username, password_hash=hash_password(password, rounds), is_admin=True)
    session.add(admin)
    await session.flush()
    logger.info(f"管理员账号创建成功: {username}")
    return admin


async def ensure_read_only_users(
    session: AsyncSession,
    accounts: Sequence[Tuple[str, str]],
    rounds: int = 10,
) -> Dict[str, int]:
    """创建只读用户，已存在的用户名跳过。"""
    created = 0
    for username, password in accounts:
        stmt = (
            sqlite_insert(User.__table__)
            .values(username=username, password_hash=hash_password(password, rounds), is_admin=False)
            .on_conflict_do_nothing(index_elements=['username'])
        )
        result = await session.execute(stmt)
        if result.rowcount:
            created += 1
            logger.info(f"创建只读用户成功: {username}")
        else:
            logger.info(f"用户 {username} 已存在，跳过创建")

    summary = {'created': created, 'skipped': len(accounts) - created, 'total': len(accounts)}
    logger.info(f"只读用户处理完成: {summary}")
    return summary


async def authenticate(session: AsyncSession, username: str, password: str) -> Optional[User]:
    """校验用户名密码，成功返回 User，否则返回 None。"""
    user = (await session.execute(select(User).where(User.username == username))).scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
