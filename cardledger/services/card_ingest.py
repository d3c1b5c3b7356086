"""
Card ingestion and reference-based catalog maintenance.

Creating a card is the only time the external card-metadata provider is
consulted; existing cards are always resolved locally.
"""

import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.catalog import create_card, delete_card, get_card_by_id, update_card
from cardledger.models.card import CardMetadata, CardUpdate, NewCard
from cardledger.models.db import CardDB
from cardledger.models.failure import ConflictError, InvalidArgumentError
from cardledger.services.card_resolver import resolve_card

logger = logging.getLogger(__name__)


class CardMetadataProvider(Protocol):
    """Source of descriptive data for cards not yet in the catalog."""

    async def lookup_by_exact_name(
        self, name: str, set_code: str | None = None
    ) -> CardMetadata: ...


async def ingest_card(
    session: AsyncSession,
    provider: CardMetadataProvider,
    name: str,
    set_code: str | None = None,
) -> CardDB:
    """
    Add a card to the catalog using provider data.

    Raises:
        InvalidArgumentError: If name is blank
        UpstreamUnavailableError: If the provider fails or does not know the card
        ConflictError: If the provider's printing is already catalogued;
            the existing card is attached to the error
    """
    if not name or not name.strip():
        raise InvalidArgumentError("card_name is required.")

    metadata = await provider.lookup_by_exact_name(name.strip(), set_code)

    existing = await get_card_by_id(session, metadata.id.lower())
    if existing is not None:
        raise ConflictError(
            f"Card '{existing.name}' already exists in the catalog.",
            detail=f"id={existing.id}",
            existing=existing,
        )

    card = await create_card(session, NewCard.from_metadata(metadata))
    logger.info("Ingested '%s' from provider as %s", card.name, card.id)
    return card


async def update_card_by_reference(
    session: AsyncSession,
    reference: str,
    update: CardUpdate,
    set_code: str | None = None,
) -> CardDB:
    """Resolve a reference, then refresh that card's descriptive fields."""
    card = await resolve_card(session, reference, set_code)
    return await update_card(session, card.id, update)


async def delete_card_by_reference(
    session: AsyncSession,
    reference: str,
    set_code: str | None = None,
    force: bool = False,
) -> CardDB:
    """
    Resolve a reference, then delete that card.

    Without force the delete is refused while any ledger row uses the card.
    """
    card = await resolve_card(session, reference, set_code)
    return await delete_card(session, card.id, force=force)
