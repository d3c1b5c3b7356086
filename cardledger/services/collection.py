"""
Collection operations: card references applied to decks and binders.

Each mutation follows the same path:
1. Resolve the card reference against the catalog
2. Confirm the container exists and belongs to the owner
3. Apply the quantity change through the container's ledger
"""

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.config import DEFAULT_CONDITION, DEFAULT_QUANTITY
from cardledger.db.containers import binders, decks
from cardledger.db.ledger import LedgerRemoval, binder_ledger, deck_ledger
from cardledger.models.card import CardCondition
from cardledger.models.db import BinderCardDB, BinderDB, DeckCardDB, DeckDB
from cardledger.services.card_resolver import CardReference, resolve_card_reference


@dataclass
class DeckContents:
    """A deck with its rows split by board."""

    deck: DeckDB
    mainboard: list[DeckCardDB] = field(default_factory=list)
    sideboard: list[DeckCardDB] = field(default_factory=list)

    @property
    def mainboard_count(self) -> int:
        return sum(row.quantity for row in self.mainboard)

    @property
    def sideboard_count(self) -> int:
        return sum(row.quantity for row in self.sideboard)


@dataclass
class BinderContents:
    """A binder with its rows."""

    binder: BinderDB
    cards: list[BinderCardDB] = field(default_factory=list)

    @property
    def total_cards(self) -> int:
        return sum(row.quantity for row in self.cards)


def _split_boards(deck: DeckDB, rows: list[DeckCardDB]) -> DeckContents:
    return DeckContents(
        deck=deck,
        mainboard=[row for row in rows if not row.is_sideboard],
        sideboard=[row for row in rows if row.is_sideboard],
    )


# --- Decks ---


async def add_card_to_deck(
    session: AsyncSession,
    owner_id: int,
    deck_id: int,
    ref: CardReference,
    quantity: int = DEFAULT_QUANTITY,
    is_sideboard: bool = False,
) -> DeckCardDB:
    """Add copies of a card to a deck's mainboard or sideboard."""
    card = await resolve_card_reference(session, ref)
    await decks.get_by_id(session, owner_id, deck_id)
    row: DeckCardDB = await deck_ledger.add_card(
        session, deck_id, card.id, quantity, is_sideboard=is_sideboard
    )
    return row


async def add_card_to_deck_by_name(
    session: AsyncSession,
    owner_id: int,
    deck_name: str,
    ref: CardReference,
    quantity: int = DEFAULT_QUANTITY,
    is_sideboard: bool = False,
) -> DeckCardDB:
    """
    Add copies of a card to a deck addressed by its exact name.

    With duplicate deck names the oldest deck receives the card.
    """
    card = await resolve_card_reference(session, ref)
    deck = await decks.get_by_exact_name(session, owner_id, deck_name)
    row: DeckCardDB = await deck_ledger.add_card(
        session, deck.id, card.id, quantity, is_sideboard=is_sideboard
    )
    return row


async def remove_card_from_deck(
    session: AsyncSession,
    owner_id: int,
    deck_id: int,
    ref: CardReference,
    quantity: int = DEFAULT_QUANTITY,
    is_sideboard: bool = False,
) -> LedgerRemoval:
    """Remove copies of a card from one board of a deck."""
    card = await resolve_card_reference(session, ref)
    await decks.get_by_id(session, owner_id, deck_id)
    return await deck_ledger.remove_card(
        session, deck_id, card.id, quantity, is_sideboard=is_sideboard
    )


async def get_deck_with_cards(session: AsyncSession, owner_id: int, deck_id: int) -> DeckContents:
    """A deck with its mainboard and sideboard rows."""
    deck = await decks.get_by_id(session, owner_id, deck_id)
    rows = await deck_ledger.list_by_container(session, deck_id)
    return _split_boards(deck, rows)


async def search_decks_with_cards(
    session: AsyncSession, owner_id: int, query: str
) -> list[DeckContents]:
    """Decks whose name contains query, each with its board split."""
    matches = await decks.search_by_name(session, owner_id, query)
    results: list[DeckContents] = []
    for deck in matches:
        rows = await deck_ledger.list_by_container(session, deck.id)
        results.append(_split_boards(deck, rows))
    return results


# --- Binders ---


async def add_card_to_binder(
    session: AsyncSession,
    owner_id: int,
    binder_id: int,
    ref: CardReference,
    quantity: int = DEFAULT_QUANTITY,
    condition: CardCondition | str = DEFAULT_CONDITION,
    notes: str = "",
) -> BinderCardDB:
    """
    Add copies of a card to a binder.

    Quantity accumulates on the binder's single row for the card;
    condition and notes are replaced by the latest values.
    """
    card = await resolve_card_reference(session, ref)
    await binders.get_by_id(session, owner_id, binder_id)
    row: BinderCardDB = await binder_ledger.add_card(
        session, binder_id, card.id, quantity, condition=condition, notes=notes
    )
    return row


async def remove_card_from_binder(
    session: AsyncSession,
    owner_id: int,
    binder_id: int,
    ref: CardReference,
    quantity: int = DEFAULT_QUANTITY,
) -> LedgerRemoval:
    """Remove copies of a card from a binder."""
    card = await resolve_card_reference(session, ref)
    await binders.get_by_id(session, owner_id, binder_id)
    return await binder_ledger.remove_card(session, binder_id, card.id, quantity)


async def get_binder_with_cards(
    session: AsyncSession, owner_id: int, binder_id: int
) -> BinderContents:
    """A binder with all of its rows, ordered by card name."""
    binder = await binders.get_by_id(session, owner_id, binder_id)
    rows = await binder_ledger.list_by_container(session, binder_id)
    return BinderContents(binder=binder, cards=rows)


async def list_binder_cards_by_condition(
    session: AsyncSession,
    owner_id: int,
    binder_id: int,
    condition: CardCondition | str,
) -> list[BinderCardDB]:
    """Rows of a binder graded with the given condition."""
    await binders.get_by_id(session, owner_id, binder_id)
    rows: list[BinderCardDB] = await binder_ledger.list_by_discriminator(
        session, binder_id, condition
    )
    return rows
