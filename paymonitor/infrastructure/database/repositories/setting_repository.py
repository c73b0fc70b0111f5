"""SQLAlchemy implementation of the per-account settings store."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from paymonitor.db.models import AccountSetting
from paymonitor.modules.common import AsyncRepository


class SqlSettingRepository(AsyncRepository[AccountSetting]):
    async def get_value(self, account_id: int, key: str) -> str | None:
        stmt = select(AccountSetting.value).where(
            AccountSetting.account_id == account_id,
            AccountSetting.key == key,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_values(self, account_id: int, keys: Iterable[str]) -> dict[str, str]:
        stmt = select(AccountSetting.key, AccountSetting.value).where(
            AccountSetting.account_id == account_id,
            AccountSetting.key.in_(list(keys)),
        )
        result = await self.session.execute(stmt)
        return {key: value for key, value in result.all()}

    async def set_value(self, account_id: int, key: str, value: str) -> None:
        if await self._update(account_id, key, value):
            return
        try:
            async with self.savepoint():
                self.session.add(AccountSetting(account_id=account_id, key=key, value=value))
                await self.session.flush()
        except IntegrityError:
            # 并发写入已创建该行，改为更新
            await self._update(account_id, key, value)

    async def list_by_key(self, key: str) -> list[tuple[int, str]]:
        stmt = (
            select(AccountSetting.account_id, AccountSetting.value)
            .where(AccountSetting.key == key)
            .order_by(AccountSetting.account_id)
        )
        result = await self.session.execute(stmt)
        return [(int(account_id), value or "") for account_id, value in result.all()]

    async def _update(self, account_id: int, key: str, value: str) -> bool:
        stmt = (
            update(AccountSetting)
            .where(AccountSetting.account_id == account_id, AccountSetting.key == key)
            .values(value=value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
