"""
Ledger engine: quantity bookkeeping over a (container, card) relation.

One engine class, instantiated once per ledger table:
- deck_ledger: key (deck_id, card_id, is_sideboard)
- binder_ledger: key (binder_id, card_id), with condition and notes
  carried as last-write-wins metadata

INVARIANTS:
1. quantity >= 1 for every stored row; a row that would drop to zero is deleted
2. Adding to an existing key is additive on quantity, never a second row
3. The add is a single INSERT ... ON CONFLICT statement, so concurrent adds
   of the same card to the same container both land
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from cardledger.config import DEFAULT_CONDITION
from cardledger.db.errors import storage_guard
from cardledger.models.card import CardCondition
from cardledger.models.db import BinderCardDB, BinderDB, CardDB, DeckCardDB, DeckDB
from cardledger.models.failure import InternalError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class LedgerTable:
    """
    Describes one ledger table to the engine.

    Attributes:
        row_model: ORM class of the ledger rows
        container_model: ORM class of the owning container
        container_column: Name of the row column pointing at the container
        label: Container kind used in messages ("Deck", "Binder")
        key_defaults: Discriminators that are part of the composite key,
            with their default values
        metadata_defaults: Non-key fields overwritten on every add
        filter_field: Column used by list_by_discriminator
        list_order: Row columns that sort before the card name
        normalizers: Per-field validation/normalization of incoming values
    """

    row_model: type[Any]
    container_model: type[Any]
    container_column: str
    label: str
    key_defaults: Mapping[str, Any] = field(default_factory=dict)
    metadata_defaults: Mapping[str, Any] = field(default_factory=dict)
    filter_field: str = ""
    list_order: tuple[str, ...] = ()
    normalizers: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LedgerRemoval:
    """Outcome of a removal: the row after the change, or the deleted row."""

    row: Any
    deleted: bool

    @property
    def remaining(self) -> int:
        return 0 if self.deleted else int(self.row.quantity)


def _require_positive(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidArgumentError(
            f"Quantity must be a positive integer, got {quantity!r}.",
        )
    return quantity


class LedgerEngine:
    """Add, remove and list ledger rows for one container kind."""

    def __init__(self, table: LedgerTable) -> None:
        self.table = table

    # --- helpers ---

    def _split_fields(
        self, fields: Mapping[str, Any], include_metadata: bool
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Separate key discriminators from metadata, applying defaults."""
        allowed = set(self.table.key_defaults)
        if include_metadata:
            allowed |= set(self.table.metadata_defaults)
        unknown = set(fields) - allowed
        if unknown:
            raise InvalidArgumentError(
                f"Unknown field(s) for {self.table.label.lower()} ledger: {sorted(unknown)}",
            )

        key = {name: fields.get(name, default) for name, default in self.table.key_defaults.items()}
        metadata: dict[str, Any] = {}
        if include_metadata:
            metadata = {
                name: default if fields.get(name) is None else fields[name]
                for name, default in self.table.metadata_defaults.items()
            }

        for values in (key, metadata):
            for name, value in values.items():
                normalize = self.table.normalizers.get(name)
                if normalize is not None:
                    values[name] = normalize(value)
        return key, metadata

    def _key_clause(self, container_id: int, card_id: str, key: Mapping[str, Any]) -> list[Any]:
        model = self.table.row_model
        clauses = [
            getattr(model, self.table.container_column) == container_id,
            model.card_id == card_id,
        ]
        clauses.extend(getattr(model, name) == value for name, value in key.items())
        return clauses

    async def _require_container(self, session: AsyncSession, container_id: int) -> None:
        if await session.get(self.table.container_model, container_id) is None:
            raise NotFoundError(f"{self.table.label} {container_id} not found.")

    # --- operations ---

    @storage_guard
    async def add_card(
        self,
        session: AsyncSession,
        container_id: int,
        card_id: str,
        quantity: int = 1,
        **discriminators: Any,
    ) -> Any:
        """
        Add copies of a card to a container.

        Inserts a new row, or adds the quantity to the existing row with the
        same composite key and overwrites its metadata.

        Raises:
            NotFoundError: If the container or the card does not exist
            InvalidArgumentError: If quantity is not positive or a field is unknown
        """
        _require_positive(quantity)
        key, metadata = self._split_fields(discriminators, include_metadata=True)

        await self._require_container(session, container_id)
        if await session.get(CardDB, card_id) is None:
            raise NotFoundError(f"Card '{card_id}' not found in the catalog.")

        dialect = session.get_bind().dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise InternalError(f"Ledger upsert is not supported on '{dialect}'.")

        model = self.table.row_model
        row_table = model.__table__
        stmt = insert(row_table).values(
            {
                self.table.container_column: container_id,
                "card_id": card_id,
                "quantity": quantity,
                **key,
                **metadata,
            }
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.table.container_column, "card_id", *key],
            set_={
                "quantity": row_table.c.quantity + stmt.excluded.quantity,
                **{name: stmt.excluded[name] for name in metadata},
            },
        ).returning(row_table.c.id)

        row_id = (await session.execute(stmt)).scalar_one()
        row = await session.get(model, row_id, populate_existing=True)
        logger.debug(
            "%s %s: +%d %s -> %d",
            self.table.label,
            container_id,
            quantity,
            card_id,
            row.quantity,
        )
        return row

    @storage_guard
    async def get_row(
        self,
        session: AsyncSession,
        container_id: int,
        card_id: str,
        **key_fields: Any,
    ) -> Any | None:
        """Get the ledger row for a composite key, or None."""
        key, _ = self._split_fields(key_fields, include_metadata=False)
        result = await session.execute(
            select(self.table.row_model).where(*self._key_clause(container_id, card_id, key))
        )
        return result.scalar_one_or_none()

    @storage_guard
    async def remove_card(
        self,
        session: AsyncSession,
        container_id: int,
        card_id: str,
        quantity: int = 1,
        **key_fields: Any,
    ) -> LedgerRemoval:
        """
        Remove copies of a card from a container.

        Removing at least as many copies as are held deletes the row.
        Otherwise the quantity is decremented and the row kept.

        Raises:
            NotFoundError: If the container does not hold the card
        """
        _require_positive(quantity)
        key, _ = self._split_fields(key_fields, include_metadata=False)
        model = self.table.row_model

        result = await session.execute(
            select(model)
            .where(*self._key_clause(container_id, card_id, key))
            .with_for_update(of=model)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(
                f"Card '{card_id}' is not in {self.table.label.lower()} {container_id}.",
            )

        if row.quantity <= quantity:
            await session.delete(row)
            await session.flush()
            return LedgerRemoval(row=row, deleted=True)

        await session.execute(
            update(model)
            .where(model.id == row.id)
            .values(quantity=model.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        await session.refresh(row)
        return LedgerRemoval(row=row, deleted=False)

    def _listing(self, container_id: int) -> Any:
        model = self.table.row_model
        order = [getattr(model, name) for name in self.table.list_order]
        return (
            select(model)
            .join(CardDB, model.card_id == CardDB.id)
            .options(contains_eager(model.card))
            .where(getattr(model, self.table.container_column) == container_id)
            .order_by(*order, CardDB.name, CardDB.set_code)
        )

    @storage_guard
    async def list_by_container(self, session: AsyncSession, container_id: int) -> list[Any]:
        """
        All rows of a container with their cards, ordered by card name.

        Raises:
            NotFoundError: If the container does not exist
        """
        await self._require_container(session, container_id)
        result = await session.execute(self._listing(container_id))
        return list(result.scalars().all())

    @storage_guard
    async def list_by_discriminator(
        self, session: AsyncSession, container_id: int, value: Any
    ) -> list[Any]:
        """Rows of a container whose filter field equals value."""
        await self._require_container(session, container_id)
        normalize = self.table.normalizers.get(self.table.filter_field)
        if normalize is not None:
            value = normalize(value)

        column = getattr(self.table.row_model, self.table.filter_field)
        result = await session.execute(self._listing(container_id).where(column == value))
        return list(result.scalars().all())

    @storage_guard
    async def count_by_container(self, session: AsyncSession, container_id: int) -> int:
        """Number of distinct rows held by a container."""
        model = self.table.row_model
        count = await session.scalar(
            select(func.count())
            .select_from(model)
            .where(getattr(model, self.table.container_column) == container_id)
        )
        return int(count or 0)

    @storage_guard
    async def delete_by_container(self, session: AsyncSession, container_id: int) -> int:
        """Delete every row of a container. Returns the number of rows deleted."""
        model = self.table.row_model
        result = await session.execute(
            delete(model).where(getattr(model, self.table.container_column) == container_id)
        )
        # rowcount is available on DELETE results; type stubs incomplete for async
        return int(result.rowcount)  # type: ignore[attr-defined]


def _normalize_condition(value: Any) -> str:
    if isinstance(value, CardCondition):
        return value.value
    return CardCondition.parse(str(value)).value


def _normalize_notes(value: Any) -> str:
    return str(value).strip()


def _normalize_board(value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidArgumentError(f"is_sideboard must be a boolean, got {value!r}.")
    return value


deck_ledger = LedgerEngine(
    LedgerTable(
        row_model=DeckCardDB,
        container_model=DeckDB,
        container_column="deck_id",
        label="Deck",
        key_defaults={"is_sideboard": False},
        filter_field="is_sideboard",
        # Mainboard (False) sorts before sideboard (True)
        list_order=("is_sideboard",),
        normalizers={"is_sideboard": _normalize_board},
    )
)

binder_ledger = LedgerEngine(
    LedgerTable(
        row_model=BinderCardDB,
        container_model=BinderDB,
        container_column="binder_id",
        label="Binder",
        metadata_defaults={"condition": DEFAULT_CONDITION, "notes": ""},
        filter_field="condition",
        normalizers={"condition": _normalize_condition, "notes": _normalize_notes},
    )
)
