"""
Deck API endpoints.

Deck lifecycle plus adding and removing cards on the mainboard or sideboard.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.dependencies import get_owner_id
from cardledger.api.schemas import (
    DeckCardResponse,
    RemovalResponse,
    deck_row_to_response,
    removal_to_response,
)
from cardledger.db import decks
from cardledger.db.database import get_session
from cardledger.models.db import DeckDB
from cardledger.services.card_resolver import CardReference
from cardledger.services.collection import (
    DeckContents,
    add_card_to_deck,
    add_card_to_deck_by_name,
    get_deck_with_cards,
    remove_card_from_deck,
    search_decks_with_cards,
)

router = APIRouter(prefix="/decks", tags=["decks"])

SessionDep = Annotated[AsyncSession, Depends(get_session)]
OwnerDep = Annotated[int, Depends(get_owner_id)]


class DeckResponse(BaseModel):
    """Response model for a deck without its cards."""

    id: int
    name: str
    description: str | None = None
    format: str | None = None
    created_at: datetime | None = None


class DeckSummaryResponse(DeckResponse):
    """A deck in a listing, with its number of distinct card rows."""

    card_count: int = 0


class DeckDetailResponse(DeckResponse):
    """A deck with its cards split by board."""

    mainboard: list[DeckCardResponse] = Field(default_factory=list)
    sideboard: list[DeckCardResponse] = Field(default_factory=list)
    mainboard_count: int = 0
    sideboard_count: int = 0


class DeckCreateRequest(BaseModel):
    """Request model for creating a deck."""

    name: str = Field(..., min_length=1, examples=["Mono Red Aggro"])
    description: str | None = None
    format: str | None = Field(default=None, examples=["modern"])


class DeckUpdateRequest(BaseModel):
    """Request model for updating a deck. Omitted fields are kept."""

    name: str | None = None
    description: str | None = None
    format: str | None = None


class DeckCardRequest(BaseModel):
    """Request model for adding a card to a deck."""

    card_id: str | None = Field(default=None, description="Catalog id of the card")
    card_name: str | None = Field(
        default=None,
        description="Exact card name, used when card_id is absent",
        examples=["Lightning Bolt"],
    )
    set_code: str | None = Field(
        default=None,
        description="Set code, required when the name has several printings",
    )
    quantity: int = Field(default=1, ge=1)
    is_sideboard: bool = False

    def reference(self) -> CardReference:
        return CardReference(card_id=self.card_id, card_name=self.card_name, set_code=self.set_code)


class DeckDeleteResponse(BaseModel):
    """Response model for deck deletion."""

    message: str
    deck: DeckResponse


def _deck_response(deck: DeckDB) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        name=deck.name,
        description=deck.description,
        format=deck.format,
        created_at=deck.created_at,
    )


def _detail_response(contents: DeckContents) -> DeckDetailResponse:
    return DeckDetailResponse(
        **_deck_response(contents.deck).model_dump(),
        mainboard=[deck_row_to_response(row) for row in contents.mainboard],
        sideboard=[deck_row_to_response(row) for row in contents.sideboard],
        mainboard_count=contents.mainboard_count,
        sideboard_count=contents.sideboard_count,
    )


@router.get("", response_model=list[DeckSummaryResponse])
async def list_decks(session: SessionDep, owner_id: OwnerDep) -> list[DeckSummaryResponse]:
    """All decks of the owner, newest first."""
    summaries = await decks.list_all(session, owner_id)
    return [
        DeckSummaryResponse(
            **_deck_response(summary.container).model_dump(),
            card_count=summary.card_count,
        )
        for summary in summaries
    ]


@router.get("/search", response_model=list[DeckDetailResponse])
async def search_decks(
    session: SessionDep,
    owner_id: OwnerDep,
    name: Annotated[str, Query(min_length=1)],
) -> list[DeckDetailResponse]:
    """Decks whose name contains the fragment, with their cards."""
    results = await search_decks_with_cards(session, owner_id, name)
    return [_detail_response(contents) for contents in results]


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    request: DeckCreateRequest, session: SessionDep, owner_id: OwnerDep
) -> DeckResponse:
    """Create a deck."""
    deck = await decks.create(
        session,
        owner_id,
        request.name,
        description=request.description,
        format=request.format,
    )
    return _deck_response(deck)


@router.get("/{deck_id}", response_model=DeckDetailResponse)
async def get_deck(deck_id: int, session: SessionDep, owner_id: OwnerDep) -> DeckDetailResponse:
    """A deck with its mainboard and sideboard."""
    contents = await get_deck_with_cards(session, owner_id, deck_id)
    return _detail_response(contents)


@router.put("/{deck_id}", response_model=DeckResponse)
async def update_deck(
    deck_id: int, request: DeckUpdateRequest, session: SessionDep, owner_id: OwnerDep
) -> DeckResponse:
    """Partially update a deck."""
    deck = await decks.update(
        session,
        owner_id,
        deck_id,
        name=request.name,
        description=request.description,
        format=request.format,
    )
    return _deck_response(deck)


@router.delete("/{deck_id}", response_model=DeckDeleteResponse)
async def delete_deck(deck_id: int, session: SessionDep, owner_id: OwnerDep) -> DeckDeleteResponse:
    """Delete a deck and all of its card rows."""
    deck = await decks.delete(session, owner_id, deck_id)
    return DeckDeleteResponse(message="Deck deleted.", deck=_deck_response(deck))


@router.post(
    "/{deck_id}/cards",
    response_model=DeckCardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_deck_card(
    deck_id: int, request: DeckCardRequest, session: SessionDep, owner_id: OwnerDep
) -> DeckCardResponse:
    """
    Add copies of a card to a deck.

    Returns 300 with the candidate printings if the name is ambiguous.
    """
    row = await add_card_to_deck(
        session,
        owner_id,
        deck_id,
        request.reference(),
        quantity=request.quantity,
        is_sideboard=request.is_sideboard,
    )
    return deck_row_to_response(row)


@router.delete("/{deck_id}/cards/{card_ref}", response_model=RemovalResponse)
async def remove_deck_card(
    deck_id: int,
    card_ref: str,
    session: SessionDep,
    owner_id: OwnerDep,
    set_code: Annotated[str | None, Query(alias="set")] = None,
    quantity: Annotated[int, Query(ge=1)] = 1,
    is_sideboard: bool = False,
) -> RemovalResponse:
    """Remove copies of a card (id or exact name) from one board of a deck."""
    removal = await remove_card_from_deck(
        session,
        owner_id,
        deck_id,
        CardReference.parse(card_ref, set_code),
        quantity=quantity,
        is_sideboard=is_sideboard,
    )
    return removal_to_response(removal)


@router.post(
    "/by-name/{deck_name}/cards",
    response_model=DeckCardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_deck_card_by_deck_name(
    deck_name: str, request: DeckCardRequest, session: SessionDep, owner_id: OwnerDep
) -> DeckCardResponse:
    """Add copies of a card to the deck with this exact name."""
    row = await add_card_to_deck_by_name(
        session,
        owner_id,
        deck_name,
        request.reference(),
        quantity=request.quantity,
        is_sideboard=request.is_sideboard,
    )
    return deck_row_to_response(row)
