"""
Binder API endpoints.

Binder lifecycle plus adding, removing and listing physical copies.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.dependencies import get_owner_id
from cardledger.api.schemas import (
    BinderCardResponse,
    RemovalResponse,
    binder_row_to_response,
    removal_to_response,
)
from cardledger.config import DEFAULT_CONDITION
from cardledger.db import binders
from cardledger.db.database import get_session
from cardledger.models.db import BinderDB
from cardledger.services.card_resolver import CardReference
from cardledger.services.collection import (
    add_card_to_binder,
    get_binder_with_cards,
    list_binder_cards_by_condition,
    remove_card_from_binder,
)

router = APIRouter(prefix="/binders", tags=["binders"])

SessionDep = Annotated[AsyncSession, Depends(get_session)]
OwnerDep = Annotated[int, Depends(get_owner_id)]


class BinderResponse(BaseModel):
    """Response model for a binder without its cards."""

    id: int
    name: str
    description: str | None = None
    created_at: datetime | None = None


class BinderSummaryResponse(BinderResponse):
    """A binder in a listing, with its number of distinct cards."""

    card_count: int = 0


class BinderDetailResponse(BinderResponse):
    """A binder with its cards."""

    cards: list[BinderCardResponse] = Field(default_factory=list)
    total_cards: int = 0


class BinderCreateRequest(BaseModel):
    """Request model for creating a binder."""

    name: str = Field(..., min_length=1, examples=["Trade Binder"])
    description: str | None = None


class BinderUpdateRequest(BaseModel):
    """Request model for updating a binder. Omitted fields are kept."""

    name: str | None = None
    description: str | None = None


class BinderCardRequest(BaseModel):
    """Request model for adding copies of a card to a binder."""

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
    condition: str = Field(default=DEFAULT_CONDITION, examples=["NM", "LP"])
    notes: str = ""


class BinderDeleteResponse(BaseModel):
    """Response model for binder deletion."""

    message: str
    binder: BinderResponse


def _binder_response(binder: BinderDB) -> BinderResponse:
    return BinderResponse(
        id=binder.id,
        name=binder.name,
        description=binder.description,
        created_at=binder.created_at,
    )


@router.get("", response_model=list[BinderSummaryResponse])
async def list_binders(session: SessionDep, owner_id: OwnerDep) -> list[BinderSummaryResponse]:
    """All binders of the owner, ordered by name."""
    summaries = await binders.list_all(session, owner_id)
    return [
        BinderSummaryResponse(
            **_binder_response(summary.container).model_dump(),
            card_count=summary.card_count,
        )
        for summary in summaries
    ]


@router.get("/search", response_model=list[BinderResponse])
async def search_binders(
    session: SessionDep,
    owner_id: OwnerDep,
    name: Annotated[str, Query(min_length=1)],
) -> list[BinderResponse]:
    """Binders whose name contains the fragment, ordered by name."""
    matches = await binders.search_by_name(session, owner_id, name)
    return [_binder_response(binder) for binder in matches]


@router.post("", response_model=BinderResponse, status_code=status.HTTP_201_CREATED)
async def create_binder(
    request: BinderCreateRequest, session: SessionDep, owner_id: OwnerDep
) -> BinderResponse:
    """Create a binder."""
    binder = await binders.create(session, owner_id, request.name, description=request.description)
    return _binder_response(binder)


@router.get("/{binder_id}", response_model=BinderDetailResponse)
async def get_binder(
    binder_id: int, session: SessionDep, owner_id: OwnerDep
) -> BinderDetailResponse:
    """A binder with all of its cards."""
    contents = await get_binder_with_cards(session, owner_id, binder_id)
    return BinderDetailResponse(
        **_binder_response(contents.binder).model_dump(),
        cards=[binder_row_to_response(row) for row in contents.cards],
        total_cards=contents.total_cards,
    )


@router.put("/{binder_id}", response_model=BinderResponse)
async def update_binder(
    binder_id: int, request: BinderUpdateRequest, session: SessionDep, owner_id: OwnerDep
) -> BinderResponse:
    """Partially update a binder."""
    binder = await binders.update(
        session, owner_id, binder_id, name=request.name, description=request.description
    )
    return _binder_response(binder)


@router.delete("/{binder_id}", response_model=BinderDeleteResponse)
async def delete_binder(
    binder_id: int, session: SessionDep, owner_id: OwnerDep
) -> BinderDeleteResponse:
    """Delete a binder and all of its card rows."""
    binder = await binders.delete(session, owner_id, binder_id)
    return BinderDeleteResponse(message="Binder deleted.", binder=_binder_response(binder))


@router.get("/{binder_id}/cards", response_model=list[BinderCardResponse])
async def list_binder_cards(
    binder_id: int, session: SessionDep, owner_id: OwnerDep
) -> list[BinderCardResponse]:
    """Cards in a binder, ordered by name."""
    contents = await get_binder_with_cards(session, owner_id, binder_id)
    return [binder_row_to_response(row) for row in contents.cards]


@router.get("/{binder_id}/cards/condition/{condition}", response_model=list[BinderCardResponse])
async def list_binder_cards_in_condition(
    binder_id: int, condition: str, session: SessionDep, owner_id: OwnerDep
) -> list[BinderCardResponse]:
    """Cards in a binder graded with the given condition."""
    rows = await list_binder_cards_by_condition(session, owner_id, binder_id, condition)
    return [binder_row_to_response(row) for row in rows]


@router.post(
    "/{binder_id}/cards",
    response_model=BinderCardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_binder_card(
    binder_id: int, request: BinderCardRequest, session: SessionDep, owner_id: OwnerDep
) -> BinderCardResponse:
    """
    Add copies of a card to a binder.

    Quantities accumulate; condition and notes take the latest values.
    Returns 300 with the candidate printings if the name is ambiguous.
    """
    row = await add_card_to_binder(
        session,
        owner_id,
        binder_id,
        CardReference(
            card_id=request.card_id, card_name=request.card_name, set_code=request.set_code
        ),
        quantity=request.quantity,
        condition=request.condition,
        notes=request.notes,
    )
    return binder_row_to_response(row)


@router.delete("/{binder_id}/cards/{card_ref}", response_model=RemovalResponse)
async def remove_binder_card(
    binder_id: int,
    card_ref: str,
    session: SessionDep,
    owner_id: OwnerDep,
    set_code: Annotated[str | None, Query(alias="set")] = None,
    quantity: Annotated[int, Query(ge=1)] = 1,
) -> RemovalResponse:
    """Remove copies of a card (id or exact name) from a binder."""
    removal = await remove_card_from_binder(
        session,
        owner_id,
        binder_id,
        CardReference.parse(card_ref, set_code),
        quantity=quantity,
    )
    return removal_to_response(removal)
