"""Repository protocol for merchant mappings."""

from __future__ import annotations

from typing import Protocol


class MerchantRepository(Protocol):
    async def get_account_id(self, app_id: str) -> int | None:
        ...
