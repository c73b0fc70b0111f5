"""
初始化商户密钥
为默认账号生成监控端通讯密钥，并可选绑定 appid

示例：
    python init_merchant.py --account-id 1 --appid shop-001
"""
from __future__ import annotations

import argparse
import asyncio
import secrets

from paymonitor.infrastructure.database import get_session, init_db
from paymonitor.infrastructure.database.repositories import SqlMerchantRepository, SqlSettingRepository
from paymonitor.modules.monitor.models import SECRET_KEY


async def init_merchant(account_id: int, appid: str | None, rotate: bool) -> None:
    """为账号写入密钥与商户映射"""
    await init_db()

    async for db in get_session():
        settings = SqlSettingRepository(db)
        key = await settings.get_value(account_id, SECRET_KEY)
        if key and not rotate:
            print(f"账号 {account_id} 已存在密钥: {key}")
        else:
            key = secrets.token_hex(16)
            await settings.set_value(account_id, SECRET_KEY, key)
            print(f"账号 {account_id} 密钥已生成: {key}")

        if appid:
            await SqlMerchantRepository(db).upsert(appid, account_id)
            print(f"appid {appid} 已绑定到账号 {account_id}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="初始化监控端商户密钥")
    parser.add_argument("--account-id", type=int, default=1)
    parser.add_argument("--appid", default=None)
    parser.add_argument("--rotate", action="store_true", help="重新生成已存在的密钥")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    asyncio.run(init_merchant(args.account_id, args.appid, args.rotate))
