"""
Response models shared across routers, with converters from ORM rows.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from cardledger.db.ledger import LedgerRemoval
from cardledger.models.db import BinderCardDB, CardDB, DeckCardDB


class CardResponse(BaseModel):
    """A catalog card."""

    id: str
    name: str
    set_code: str | None = None
    collector_number: str | None = None
    image_url: str | None = None
    usd_price: str | None = None
    eur_price: str | None = None
    last_updated: datetime | None = None


class DeckCardResponse(BaseModel):
    """A deck ledger row with its card."""

    card: CardResponse
    quantity: int
    is_sideboard: bool


class BinderCardResponse(BaseModel):
    """A binder ledger row with its card."""

    card: CardResponse
    quantity: int
    condition: str
    notes: str = ""


class RemovalResponse(BaseModel):
    """Outcome of removing copies of a card from a container."""

    message: str
    card: CardResponse
    deleted: bool = Field(..., description="True if the row was removed entirely")
    remaining: int = Field(..., description="Copies left after the removal")


def card_to_response(card: CardDB) -> CardResponse:
    return CardResponse(
        id=card.id,
        name=card.name,
        set_code=card.set_code,
        collector_number=card.collector_number,
        image_url=card.image_url,
        usd_price=card.usd_price,
        eur_price=card.eur_price,
        last_updated=card.last_updated,
    )


def deck_row_to_response(row: DeckCardDB) -> DeckCardResponse:
    return DeckCardResponse(
        card=card_to_response(row.card),
        quantity=row.quantity,
        is_sideboard=row.is_sideboard,
    )


def binder_row_to_response(row: BinderCardDB) -> BinderCardResponse:
    return BinderCardResponse(
        card=card_to_response(row.card),
        quantity=row.quantity,
        condition=row.condition,
        notes=row.notes or "",
    )


def removal_to_response(removal: LedgerRemoval) -> RemovalResponse:
    if removal.deleted:
        message = "Card removed."
    else:
        message = f"{removal.remaining} cop{'y' if removal.remaining == 1 else 'ies'} left."
    return RemovalResponse(
        message=message,
        card=card_to_response(removal.row.card),
        deleted=removal.deleted,
        remaining=removal.remaining,
    )
