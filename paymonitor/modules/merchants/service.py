"""Map the ``appid`` carried by monitor messages to an internal account."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from paymonitor.infrastructure.database.repositories.merchant_repository import SqlMerchantRepository

from .exceptions import UnknownMerchantError
from .repository import MerchantRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MerchantResolver:
    repository: MerchantRepository
    default_account_id: int = 1

    @classmethod
    def with_session(cls, session: AsyncSession, default_account_id: int = 1) -> "MerchantResolver":
        return cls(SqlMerchantRepository(session), default_account_id)

    async def resolve(self, external_id: Optional[str]) -> int:
        if not external_id:
            return self.default_account_id

        account_id = await self.repository.get_account_id(external_id)
        if account_id is None:
            logger.warning("appid %s 未找到对应商户", external_id)
            raise UnknownMerchantError(external_id)
        return account_id
