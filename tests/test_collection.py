"""
Tests for collection operations.

Each test walks the full path: resolve a card reference, check the
container, then apply the ledger change.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.containers import binders, decks
from cardledger.models.failure import AmbiguousCardError, InvalidArgumentError, NotFoundError
from cardledger.services.card_resolver import CardReference
from cardledger.services.collection import (
    add_card_to_binder,
    add_card_to_deck,
    add_card_to_deck_by_name,
    get_binder_with_cards,
    get_deck_with_cards,
    list_binder_cards_by_condition,
    remove_card_from_binder,
    remove_card_from_deck,
    search_decks_with_cards,
)
from tests.factories import BOLT_A_ID, BOLT_B_ID

OWNER = 1

BOLT_IN_A = CardReference(card_name="Bolt", set_code="a")
BOLT_IN_B = CardReference(card_name="Bolt", set_code="b")


class TestDeckCollection:
    async def test_ambiguous_then_disambiguated(self, session: AsyncSession, two_bolts) -> None:
        """Adding "Bolt" fails with both printings, then succeeds with a set."""
        deck = await decks.create(session, OWNER, "Burn")

        with pytest.raises(AmbiguousCardError) as exc_info:
            await add_card_to_deck(session, OWNER, deck.id, CardReference(card_name="Bolt"))
        assert {c.set_code for c in exc_info.value.candidates} == {"a", "b"}

        row = await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_A, quantity=4)

        assert row.card_id == BOLT_A_ID
        assert row.quantity == 4

    async def test_add_by_id(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, OWNER, "Burn")

        row = await add_card_to_deck(
            session, OWNER, deck.id, CardReference(card_id=BOLT_B_ID), is_sideboard=True
        )

        assert row.quantity == 1
        assert row.is_sideboard is True

    async def test_other_owners_deck(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, 2, "Not Mine")

        with pytest.raises(NotFoundError):
            await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_A)

    async def test_add_by_deck_name(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, OWNER, "Burn")

        row = await add_card_to_deck_by_name(session, OWNER, "Burn", BOLT_IN_A, quantity=2)

        assert row.deck_id == deck.id

    async def test_add_to_unknown_deck_name(self, session: AsyncSession, two_bolts) -> None:
        with pytest.raises(NotFoundError):
            await add_card_to_deck_by_name(session, OWNER, "Nope", BOLT_IN_A)

    async def test_remove(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, OWNER, "Burn")
        await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_A, quantity=4)

        removal = await remove_card_from_deck(session, OWNER, deck.id, BOLT_IN_A, quantity=1)

        assert removal.remaining == 3

    async def test_remove_wrong_board(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, OWNER, "Burn")
        await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_A, quantity=4)

        with pytest.raises(NotFoundError):
            await remove_card_from_deck(session, OWNER, deck.id, BOLT_IN_A, is_sideboard=True)

    async def test_deck_contents(self, session: AsyncSession, two_bolts) -> None:
        deck = await decks.create(session, OWNER, "Burn")
        await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_A, quantity=4)
        await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_B, quantity=3)
        await add_card_to_deck(session, OWNER, deck.id, BOLT_IN_B, quantity=2, is_sideboard=True)

        contents = await get_deck_with_cards(session, OWNER, deck.id)

        assert contents.deck.name == "Burn"
        assert [r.card.set_code for r in contents.mainboard] == ["a", "b"]
        assert contents.mainboard_count == 7
        assert contents.sideboard_count == 2

    async def test_search_decks(self, session: AsyncSession, two_bolts) -> None:
        burn = await decks.create(session, OWNER, "Burn")
        await decks.create(session, OWNER, "Control")
        await add_card_to_deck(session, OWNER, burn.id, BOLT_IN_A, quantity=4)

        results = await search_decks_with_cards(session, OWNER, "bur")

        assert len(results) == 1
        assert results[0].deck.id == burn.id
        assert results[0].mainboard_count == 4


class TestBinderCollection:
    async def test_add_with_condition(self, session: AsyncSession, two_bolts) -> None:
        binder = await binders.create(session, OWNER, "Trades")

        row = await add_card_to_binder(
            session, OWNER, binder.id, BOLT_IN_A, quantity=2, condition="mp", notes="signed"
        )

        assert row.condition == "MP"
        assert row.notes == "signed"

    async def test_invalid_condition(self, session: AsyncSession, two_bolts) -> None:
        binder = await binders.create(session, OWNER, "Trades")

        with pytest.raises(InvalidArgumentError):
            await add_card_to_binder(session, OWNER, binder.id, BOLT_IN_A, condition="great")

    async def test_binder_contents(self, session: AsyncSession, two_bolts) -> None:
        binder = await binders.create(session, OWNER, "Trades")
        await add_card_to_binder(session, OWNER, binder.id, BOLT_IN_A, quantity=2)
        await add_card_to_binder(session, OWNER, binder.id, BOLT_IN_B, quantity=3, condition="LP")

        contents = await get_binder_with_cards(session, OWNER, binder.id)

        assert contents.total_cards == 5
        near_mint = await list_binder_cards_by_condition(session, OWNER, binder.id, "NM")
        assert [r.card_id for r in near_mint] == [BOLT_A_ID]

    async def test_remove_all_copies(self, session: AsyncSession, two_bolts) -> None:
        binder = await binders.create(session, OWNER, "Trades")
        await add_card_to_binder(session, OWNER, binder.id, BOLT_IN_A, quantity=2)

        removal = await remove_card_from_binder(session, OWNER, binder.id, BOLT_IN_A, quantity=2)

        assert removal.deleted
        assert (await get_binder_with_cards(session, OWNER, binder.id)).cards == []

    async def test_unknown_card_leaves_binder_untouched(
        self, session: AsyncSession, two_bolts
    ) -> None:
        binder = await binders.create(session, OWNER, "Trades")

        with pytest.raises(NotFoundError):
            await add_card_to_binder(
                session, OWNER, binder.id, CardReference(card_name="Counterspell")
            )

        assert (await get_binder_with_cards(session, OWNER, binder.id)).cards == []
