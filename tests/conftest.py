from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardledger.api.dependencies import get_card_provider
from cardledger.db.catalog import create_card
from cardledger.db.database import get_session
from cardledger.main import app
from cardledger.models.card import NewCard
from cardledger.models.db import Base, CardDB
from tests.factories import BOLT_A_ID, BOLT_B_ID, SHOCK_ID, CardFactory, FakeProvider, metadata


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def make_card(session: AsyncSession) -> CardFactory:
    """Create catalog cards directly, bypassing the provider."""

    async def _make(
        name: str,
        set_code: str | None = None,
        collector_number: str | None = None,
        card_id: str | None = None,
        **extra: Any,
    ) -> CardDB:
        return await create_card(
            session,
            NewCard(
                id=card_id,
                name=name,
                set_code=set_code,
                collector_number=collector_number,
                **extra,
            ),
        )

    return _make


@pytest.fixture
async def two_bolts(make_card: CardFactory) -> tuple[CardDB, CardDB]:
    """The same card name printed in set A and set B."""
    bolt_a = await make_card("Bolt", "a", "1", card_id=BOLT_A_ID, image_url="https://img/a.jpg")
    bolt_b = await make_card("Bolt", "b", "7", card_id=BOLT_B_ID, image_url="https://img/b.jpg")
    return bolt_a, bolt_b


@pytest.fixture
def scryfall_card_payload() -> dict[str, Any]:
    """Trimmed Scryfall card object."""
    return {
        "object": "card",
        "id": "e3285e6b-3e79-4d7c-bf96-d920f973b80d",
        "name": "Lightning Bolt",
        "set": "m11",
        "collector_number": "149",
        "image_uris": {
            "small": "https://cards.scryfall.io/small/front/e/3/e3285e6b.jpg",
            "normal": "https://cards.scryfall.io/normal/front/e/3/e3285e6b.jpg",
        },
        "prices": {"usd": "1.99", "usd_foil": "6.50", "eur": "1.45", "tix": "0.03"},
        "type_line": "Instant",
    }


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def card_provider() -> FakeProvider:
    """Provider that knows Shock (m19) and nothing else."""
    return FakeProvider([metadata("Shock", "m19", "156", SHOCK_ID)])


@pytest.fixture
async def client(session_factory, card_provider: FakeProvider):
    """Provide an async test client with overridden database session and provider."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_card_provider] = lambda: card_provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def seeded_bolts(session_factory) -> None:
    """Commit the two Bolt printings for API tests."""
    async with session_factory() as session:
        for card_id, set_code, number in ((BOLT_A_ID, "a", "1"), (BOLT_B_ID, "b", "7")):
            await create_card(
                session,
                NewCard(id=card_id, name="Bolt", set_code=set_code, collector_number=number),
            )
        await session.commit()
