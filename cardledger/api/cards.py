"""
Card API endpoints.

Catalog lookup and search, ingestion of new cards from the card-metadata
provider, descriptive refresh and deletion by flexible reference.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.dependencies import get_card_provider
from cardledger.api.schemas import CardResponse, card_to_response
from cardledger.db import get_card_by_id, search_cards
from cardledger.db.database import get_session
from cardledger.models.card import CardUpdate
from cardledger.models.failure import NotFoundError
from cardledger.services.card_ingest import (
    CardMetadataProvider,
    delete_card_by_reference,
    ingest_card,
    update_card_by_reference,
)

router = APIRouter(prefix="/cards", tags=["cards"])


class CardDetailResponse(CardResponse):
    """A catalog card including the raw provider payload."""

    catalog_data: dict[str, Any] | None = None


class CardCreateRequest(BaseModel):
    """Request model for ingesting a card from the provider."""

    card_name: str = Field(
        ...,
        min_length=1,
        description="Exact card name as known to the card-metadata provider",
        examples=["Lightning Bolt"],
    )
    set_code: str | None = Field(
        default=None,
        description="Optional set code to pick a specific printing",
        examples=["lea"],
    )


class CardUpdateRequest(BaseModel):
    """Request model for refreshing descriptive fields. Omitted fields are kept."""

    image_url: str | None = None
    usd_price: str | None = None
    eur_price: str | None = None
    catalog_data: dict[str, Any] | None = None


class CardDeleteResponse(BaseModel):
    """Response model for card deletion."""

    message: str
    card: CardResponse


@router.get("/search", response_model=list[CardResponse])
async def search_catalog(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str, Query(min_length=1, description="Name fragment")],
    set_code: Annotated[str | None, Query(alias="set")] = None,
) -> list[CardResponse]:
    """
    Case-insensitive name search.

    Ordered by name, then set.
    """
    cards = await search_cards(session, q, set_code)
    return [card_to_response(card) for card in cards]


@router.get("/{card_id}", response_model=CardDetailResponse)
async def get_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardDetailResponse:
    """Get a card by catalog id."""
    card = await get_card_by_id(session, card_id.strip().lower())
    if card is None:
        raise NotFoundError(f"Card '{card_id}' not found.")

    return CardDetailResponse(
        **card_to_response(card).model_dump(),
        catalog_data=card.catalog_data,
    )


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card_from_provider(
    request: CardCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    provider: Annotated[CardMetadataProvider, Depends(get_card_provider)],
) -> CardResponse:
    """
    Add a card to the catalog from the card-metadata provider.

    Returns 409 if the provider's printing is already catalogued.
    """
    card = await ingest_card(session, provider, request.card_name, request.set_code)
    return card_to_response(card)


@router.put("/{reference}", response_model=CardResponse)
async def update_card(
    reference: str,
    request: CardUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    set_code: Annotated[str | None, Query(alias="set")] = None,
) -> CardResponse:
    """
    Refresh a card's image, prices or raw payload.

    The card may be addressed by id or by exact name (plus set).
    """
    update = CardUpdate(
        image_url=request.image_url,
        usd_price=request.usd_price,
        eur_price=request.eur_price,
        catalog_data=request.catalog_data,
    )
    card = await update_card_by_reference(session, reference, update, set_code)
    return card_to_response(card)


@router.delete("/{reference}", response_model=CardDeleteResponse)
async def delete_card(
    reference: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    set_code: Annotated[str | None, Query(alias="set")] = None,
    force: Annotated[
        bool, Query(description="Also remove the card from every deck and binder")
    ] = False,
) -> CardDeleteResponse:
    """
    Delete a card from the catalog.

    Returns 409 while any deck or binder holds the card, unless force=true.
    """
    card = await delete_card_by_reference(session, reference, set_code, force=force)
    return CardDeleteResponse(message="Card deleted.", card=card_to_response(card))
