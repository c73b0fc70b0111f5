"""SQLAlchemy implementation of the merchant mapping repository."""

from __future__ import annotations

from sqlalchemy import select

from paymonitor.db.models import MerchantMapping
from paymonitor.modules.common import AsyncRepository


class SqlMerchantRepository(AsyncRepository[MerchantMapping]):
    async def get_account_id(self, app_id: str) -> int | None:
        stmt = select(MerchantMapping.account_id).where(
            MerchantMapping.app_id == app_id,
            MerchantMapping.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        account_id = result.scalar_one_or_none()
        return int(account_id) if account_id is not None else None

    async def upsert(self, app_id: str, account_id: int) -> MerchantMapping:
        model = await self.session.get(MerchantMapping, app_id)
        if model is None:
            model = MerchantMapping(app_id=app_id, account_id=account_id, is_active=True)
            self.session.add(model)
        else:
            model.account_id = account_id
            model.is_active = True
        await self.session.flush()
        return model
