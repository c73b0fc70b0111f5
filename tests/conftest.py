"""
Pytest configuration and fixtures.
"""
from typing import Any, AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from paymonitor.core.config import Settings
from paymonitor.core.container import ApplicationContainer
from paymonitor.core.signature import compute_signature
from paymonitor.db.models import PayOrder
from paymonitor.infrastructure.database import init_db
from paymonitor.infrastructure.database.repositories import SqlMerchantRepository, SqlSettingRepository
from paymonitor.interfaces.http.deps import get_app_settings, get_db_session
from paymonitor.main import create_app
from paymonitor.modules.orders import PaymentKind, new_pending_order

NOW = 1_700_000_000
SECRET = "abc"
SHOP_APPID = "shop-002"
SHOP_SECRET = "s3cr3t-shop"

OrderFactory = Callable[..., Awaitable[PayOrder]]


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        environment="test",
        scheduler={"enabled": False},
        database={"url": "sqlite+aiosqlite:///:memory:"},
    )


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, Any]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'paymonitor-test.db'}",
        connect_args={"timeout": 15},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(session_factory) -> None:
    """Account 1 (bootstrap, no appid) and account 2 (``SHOP_APPID``) with secrets."""
    async with session_factory() as session:
        settings = SqlSettingRepository(session)
        await settings.set_value(1, "key", SECRET)
        await settings.set_value(2, "key", SHOP_SECRET)
        await SqlMerchantRepository(session).upsert(SHOP_APPID, 2)
        await session.commit()


@pytest.fixture
def order_factory(session_factory) -> OrderFactory:
    counter = {"n": 0}

    async def _create(
        *,
        actual: int,
        requested: int | None = None,
        account_id: int = 1,
        kind: PaymentKind = PaymentKind.WECHAT,
        created_at: int = NOW,
        code: str | None = None,
    ) -> PayOrder:
        counter["n"] += 1
        model = new_pending_order(
            order_code=code or f"ORD{counter['n']:04d}",
            account_id=account_id,
            kind=kind,
            requested_amount_cents=actual if requested is None else requested,
            actual_amount_cents=actual,
            now=created_at,
        )
        async with session_factory() as session:
            session.add(model)
            await session.commit()
        return model

    return _create


@pytest_asyncio.fixture
async def client(test_settings, session_factory, seeded) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client bound to the temporary database."""
    container = ApplicationContainer(settings=test_settings, session_factory=session_factory)
    app = create_app(container)

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_app_settings] = lambda: test_settings
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def sign_heartbeat(t: str, secret: str = SECRET) -> str:
    return compute_signature([], t, secret)


def sign_push(kind: str, price: str, t: str, secret: str = SECRET) -> str:
    return compute_signature([kind, price], t, secret)
