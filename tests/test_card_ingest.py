"""Tests for card ingestion and reference-based catalog maintenance."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.catalog import get_card_by_id
from cardledger.db.containers import decks
from cardledger.db.ledger import deck_ledger
from cardledger.models.card import CardUpdate
from cardledger.models.failure import (
    AmbiguousCardError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamUnavailableError,
)
from cardledger.services.card_ingest import (
    delete_card_by_reference,
    ingest_card,
    update_card_by_reference,
)
from tests.factories import BOLT_A_ID, BOLT_B_ID, SHOCK_ID, FakeProvider


class TestIngestCard:
    async def test_creates_from_provider(self, session: AsyncSession, card_provider) -> None:
        card = await ingest_card(session, card_provider, "  Shock ")

        assert card.id == SHOCK_ID
        assert card.set_code == "m19"
        assert card.usd_price == "0.25"
        assert card.catalog_data == {"id": SHOCK_ID, "name": "Shock", "set": "m19"}
        assert card_provider.calls == [("Shock", None)]

    async def test_passes_set_to_provider(self, session: AsyncSession, card_provider) -> None:
        await ingest_card(session, card_provider, "Shock", "M19")

        assert card_provider.calls == [("Shock", "M19")]

    async def test_already_catalogued(self, session: AsyncSession, card_provider) -> None:
        """A second ingest of the same printing reports the existing card."""
        await ingest_card(session, card_provider, "Shock")

        with pytest.raises(ConflictError) as exc_info:
            await ingest_card(session, card_provider, "Shock")

        assert exc_info.value.existing.id == SHOCK_ID

    async def test_unknown_to_provider(self, session: AsyncSession, card_provider) -> None:
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await ingest_card(session, card_provider, "Shok")

        assert exc_info.value.retryable is False
        assert await get_card_by_id(session, SHOCK_ID) is None

    async def test_provider_down(self, session: AsyncSession) -> None:
        provider = FakeProvider(error=UpstreamUnavailableError("down"))

        with pytest.raises(UpstreamUnavailableError):
            await ingest_card(session, provider, "Shock")

    async def test_blank_name_skips_provider(self, session: AsyncSession, card_provider) -> None:
        with pytest.raises(InvalidArgumentError):
            await ingest_card(session, card_provider, " ")

        assert card_provider.calls == []


class TestUpdateByReference:
    async def test_update_by_name_and_set(self, session: AsyncSession, two_bolts) -> None:
        card = await update_card_by_reference(
            session, "Bolt", CardUpdate(eur_price="0.80"), set_code="b"
        )

        assert card.id == BOLT_B_ID
        assert card.eur_price == "0.80"

    async def test_ambiguous_update(self, session: AsyncSession, two_bolts) -> None:
        with pytest.raises(AmbiguousCardError):
            await update_card_by_reference(session, "Bolt", CardUpdate(eur_price="0.80"))


class TestDeleteByReference:
    async def test_delete_by_id(self, session: AsyncSession, two_bolts) -> None:
        await delete_card_by_reference(session, BOLT_A_ID)

        assert await get_card_by_id(session, BOLT_A_ID) is None

    async def test_delete_blocked_then_forced(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, 1, "Burn")
        await deck_ledger.add_card(session, deck.id, BOLT_B_ID, 4)

        with pytest.raises(ConflictError):
            await delete_card_by_reference(session, "Bolt", set_code="b")

        deleted = await delete_card_by_reference(session, "Bolt", set_code="b", force=True)

        assert deleted.id == BOLT_B_ID
        assert await deck_ledger.count_by_container(session, deck.id) == 0

    async def test_delete_unknown(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await delete_card_by_reference(session, "Nothing")
