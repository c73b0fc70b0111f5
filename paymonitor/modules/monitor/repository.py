"""Repository protocol for the per-account settings store."""

from __future__ import annotations

from typing import Iterable, Protocol

from sqlalchemy.ext.asyncio import AsyncSessionTransaction


class SettingRepository(Protocol):
    async def get_value(self, account_id: int, key: str) -> str | None:
        ...

    async def get_values(self, account_id: int, keys: Iterable[str]) -> dict[str, str]:
        ...

    async def set_value(self, account_id: int, key: str, value: str) -> None:
        ...

    async def list_by_key(self, key: str) -> list[tuple[int, str]]:
        ...

    def savepoint(self) -> AsyncSessionTransaction:
        ...
