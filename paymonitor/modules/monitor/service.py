"""Ingestion of signed heartbeat and payment push messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from paymonitor.core.signature import InvalidSignatureError, verify_signature
from paymonitor.infrastructure.database.repositories.setting_repository import SqlSettingRepository
from paymonitor.modules.merchants.service import MerchantResolver
from paymonitor.modules.orders import InvalidAmountError, PaymentKind, UnknownPaymentKindError, parse_amount_cents
from paymonitor.modules.orders.matcher import OrderMatcher

from .exceptions import InvalidPushPayloadError, SecretKeyMissingError
from .heartbeat import HeartbeatTracker
from .models import (
    HEARTBEAT_TIMEOUT_SECONDS,
    SECRET_KEY,
    HeartbeatMessage,
    PushMessage,
    PushOutcome,
)
from .repository import SettingRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MonitorService:
    resolver: MerchantResolver
    settings: SettingRepository
    tracker: HeartbeatTracker
    matcher: OrderMatcher

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        *,
        default_account_id: int = 1,
        heartbeat_timeout: int = HEARTBEAT_TIMEOUT_SECONDS,
    ) -> "MonitorService":
        settings = SqlSettingRepository(session)
        return cls(
            resolver=MerchantResolver.with_session(session, default_account_id),
            settings=settings,
            tracker=HeartbeatTracker(settings, heartbeat_timeout),
            matcher=OrderMatcher.with_session(session),
        )

    async def process_heartbeat(self, message: HeartbeatMessage, now: int) -> int:
        account_id = await self._authenticate(message.appid, [], message.t, message.sign)
        await self.tracker.record_heartbeat(account_id, now)
        logger.debug("账号 %s 心跳已记录", account_id)
        return account_id

    async def process_push(self, message: PushMessage, now: int) -> PushOutcome:
        account_id = await self._authenticate(
            message.appid,
            message.signed_fields,
            message.t,
            message.sign,
        )
        try:
            kind = PaymentKind.parse(message.type)
            amount_cents = parse_amount_cents(message.price)
        except (UnknownPaymentKindError, InvalidAmountError) as exc:
            logger.warning("账号 %s 推送内容无效: type=%s price=%s", account_id, message.type, message.price)
            raise InvalidPushPayloadError(str(exc)) from exc

        # 无论是否匹配到订单都记录最后收款时间
        await self.tracker.record_payment(account_id, now)
        order = await self.matcher.match(account_id, amount_cents, kind, now)
        return PushOutcome(account_id=account_id, order=order)

    async def _authenticate(
        self,
        appid: Optional[str],
        fields: Sequence[str],
        timestamp: str,
        signature: str,
    ) -> int:
        account_id = await self.resolver.resolve(appid)
        secret = await self.settings.get_value(account_id, SECRET_KEY)
        if not secret:
            raise SecretKeyMissingError(f"account {account_id} has no secret key")
        try:
            verify_signature(fields, timestamp, signature, secret)
        except InvalidSignatureError:
            logger.warning("账号 %s 签名校验失败", account_id)
            raise
        return account_id
