"""Alembic environment for the reconciliation schema."""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.engine.url import make_url

from paymonitor.core.config import get_settings
from paymonitor.db import models  # noqa: F401
from paymonitor.infrastructure.database.base import Base
from paymonitor.infrastructure.database.session import dispose_engine, get_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _offline_url() -> str:
    # 离线模式只生成 SQL，使用同步驱动名即可
    url = make_url(get_settings().database_url)
    return url.set(drivername=url.get_backend_name()).render_as_string(hide_password=False)


def _configure(**options) -> None:
    # SQLite 不支持大部分 ALTER TABLE，迁移以 batch 方式重建表
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,
        **options,
    )


def run_migrations_offline() -> None:
    _configure(
        url=_offline_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _apply(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply migrations through the application's async engine."""
    try:
        async with get_engine().connect() as connection:
            await connection.run_sync(_apply)
            await connection.commit()
    finally:
        await dispose_engine()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
