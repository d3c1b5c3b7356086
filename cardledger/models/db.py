"""
SQLAlchemy ORM models for persistent storage.

Four logical tables: the card catalog, the two container kinds (decks and
binders) and one ledger table per container kind.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    A single card printing in the catalog.

    Identity (id, name, set, collector number) is fixed at creation.
    Image, prices and the raw provider payload may be refreshed.
    """

    __tablename__ = "cards"
    __table_args__ = (
        UniqueConstraint("set_code", "collector_number", name="uq_card_printing"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True, index=True)
    collector_number: Mapped[str | None] = mapped_column(String(32), nullable=True)

    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Prices are kept exactly as the provider reported them
    usd_price: Mapped[str | None] = mapped_column(String(32), nullable=True)
    eur_price: Mapped[str | None] = mapped_column(String(32), nullable=True)
    catalog_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, set={self.set_code})>"


class DeckDB(Base):
    """A play configuration with mainboard and sideboard partitions."""

    __tablename__ = "decks"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    format: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class BinderDB(Base):
    """A physical-inventory lot of cards."""

    __tablename__ = "binders"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<BinderDB(id={self.id}, name={self.name})>"


class DeckCardDB(Base):
    """
    Deck ledger row.

    The same card may sit independently in the mainboard and the sideboard,
    so the board flag is part of the key.
    """

    __tablename__ = "deck_cards"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", "is_sideboard", name="uq_deck_card_board"),
        CheckConstraint("quantity >= 1", name="ck_deck_cards_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("cards.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    is_sideboard: Mapped[bool] = mapped_column(Boolean, default=False)

    card: Mapped[CardDB] = relationship(lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        board = "side" if self.is_sideboard else "main"
        return f"<DeckCardDB(deck={self.deck_id}, card={self.card_id}, {board}, qty={self.quantity})>"


class BinderCardDB(Base):
    """
    Binder ledger row.

    One row per card per binder; condition and notes describe that row.
    """

    __tablename__ = "binder_cards"
    __table_args__ = (
        UniqueConstraint("binder_id", "card_id", name="uq_binder_card"),
        CheckConstraint("quantity >= 1", name="ck_binder_cards_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    binder_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("binders.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("cards.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    condition: Mapped[str] = mapped_column(String(8), default="NM", index=True)
    notes: Mapped[str] = mapped_column(Text, default="")

    card: Mapped[CardDB] = relationship(lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<BinderCardDB(binder={self.binder_id}, card={self.card_id}, qty={self.quantity})>"
