"""
Card catalog operations.

Canonical store of card printings: lookups by id, exact name, printing
and name fragment, plus creation, descriptive refresh and deletion.
"""

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.errors import storage_guard
from cardledger.models.card import CardUpdate, CardUsage, NewCard, is_card_id
from cardledger.models.db import BinderCardDB, CardDB, DeckCardDB
from cardledger.models.failure import ConflictError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


@storage_guard
async def get_card_by_id(session: AsyncSession, card_id: str) -> CardDB | None:
    """Get a card by its catalog id. Returns None if absent."""
    return await session.get(CardDB, card_id)


@storage_guard
async def get_card_by_exact_name(session: AsyncSession, name: str) -> CardDB | None:
    """
    Get one card whose name matches exactly.

    With several printings of the same name the one with the greatest
    set code wins. Callers that need a particular printing must pass
    a set or an id instead.
    """
    result = await session.execute(
        select(CardDB)
        .where(CardDB.name == name)
        .order_by(
            CardDB.set_code.desc().nulls_last(),
            CardDB.collector_number.desc().nulls_last(),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


@storage_guard
async def find_cards_by_exact_name(session: AsyncSession, name: str) -> list[CardDB]:
    """Get every printing whose name matches exactly, ordered by set."""
    result = await session.execute(
        select(CardDB)
        .where(CardDB.name == name)
        .order_by(CardDB.set_code, CardDB.collector_number)
    )
    return list(result.scalars().all())


@storage_guard
async def get_card_by_set_and_number(
    session: AsyncSession, set_code: str, collector_number: str
) -> CardDB | None:
    """Get the printing identified by set code and collector number."""
    result = await session.execute(
        select(CardDB).where(
            func.lower(CardDB.set_code) == set_code.lower(),
            CardDB.collector_number == collector_number,
        )
    )
    return result.scalar_one_or_none()


@storage_guard
async def search_cards(
    session: AsyncSession, query: str, set_filter: str | None = None
) -> list[CardDB]:
    """
    Case-insensitive substring search on card names.

    Optionally restricted to one set. Ordered by name, then set.
    """
    stmt = select(CardDB).where(CardDB.name.icontains(query, autoescape=True))
    if set_filter:
        stmt = stmt.where(func.lower(CardDB.set_code) == set_filter.lower())

    result = await session.execute(stmt.order_by(CardDB.name, CardDB.set_code))
    return list(result.scalars().all())


@storage_guard
async def create_card(session: AsyncSession, data: NewCard) -> CardDB:
    """
    Add a printing to the catalog.

    Supplied ids must be UUID text and are stored lowercase.

    Raises ConflictError if the id or the (set, collector number) printing
    is already catalogued. The conflicting card travels on the error.
    """
    if not data.name or not data.name.strip():
        raise InvalidArgumentError("Card name is required.")

    card_id: str | None = None
    if data.id is not None:
        if not is_card_id(data.id):
            raise InvalidArgumentError(
                f"Malformed card id '{data.id}'.",
                suggestion="Card ids are UUIDs; omit the id to have one generated.",
            )
        card_id = data.id.strip().lower()
        existing = await session.get(CardDB, card_id)
        if existing is not None:
            raise ConflictError(
                f"Card '{existing.name}' already exists in the catalog.",
                detail=f"id={existing.id}",
                existing=existing,
            )

    if data.set_code and data.collector_number:
        existing = await get_card_by_set_and_number(session, data.set_code, data.collector_number)
        if existing is not None:
            raise ConflictError(
                f"Printing {data.set_code} #{data.collector_number} already exists.",
                detail=f"id={existing.id}",
                existing=existing,
            )

    card = CardDB(
        id=card_id or str(uuid.uuid4()),
        name=data.name.strip(),
        set_code=data.set_code,
        collector_number=data.collector_number,
        image_url=data.image_url,
        usd_price=data.usd_price,
        eur_price=data.eur_price,
        catalog_data=data.catalog_data,
        last_updated=datetime.now(UTC),
    )
    session.add(card)
    await session.flush()
    logger.info("Catalogued card %s (%s %s)", card.name, card.set_code, card.id)
    return card


@storage_guard
async def update_card(session: AsyncSession, card_id: str, update: CardUpdate) -> CardDB:
    """
    Refresh a card's descriptive fields.

    Only the fields present in the update are replaced; identity fields
    are never touched.
    """
    card = await session.get(CardDB, card_id)
    if card is None:
        raise NotFoundError(f"Card '{card_id}' not found.")

    for field_name, value in update.changes().items():
        setattr(card, field_name, value)
    card.last_updated = datetime.now(UTC)

    await session.flush()
    return card


@storage_guard
async def count_card_references(session: AsyncSession, card_id: str) -> CardUsage:
    """Count deck and binder ledger rows that reference a card."""
    deck_rows = await session.scalar(
        select(func.count()).select_from(DeckCardDB).where(DeckCardDB.card_id == card_id)
    )
    binder_rows = await session.scalar(
        select(func.count()).select_from(BinderCardDB).where(BinderCardDB.card_id == card_id)
    )
    return CardUsage(deck_rows=int(deck_rows or 0), binder_rows=int(binder_rows or 0))


@storage_guard
async def delete_card(session: AsyncSession, card_id: str, force: bool = False) -> CardDB:
    """
    Delete a card from the catalog.

    Raises ConflictError while any deck or binder still holds the card,
    unless force is set: then the referencing ledger rows are deleted
    first, in the same transaction.

    Returns the deleted card.
    """
    card = await session.get(CardDB, card_id)
    if card is None:
        raise NotFoundError(f"Card '{card_id}' not found.")

    usage = await count_card_references(session, card_id)
    if usage.in_use:
        if not force:
            raise ConflictError(
                f"Card '{card.name}' is still in use.",
                detail=f"{usage.deck_rows} deck row(s), {usage.binder_rows} binder row(s)",
                suggestion="Remove it from every deck and binder, or delete with force.",
            )
        await session.execute(delete(DeckCardDB).where(DeckCardDB.card_id == card_id))
        await session.execute(delete(BinderCardDB).where(BinderCardDB.card_id == card_id))
        logger.info("Removed %d ledger row(s) for card %s", usage.total, card_id)

    await session.delete(card)
    await session.flush()
    return card
