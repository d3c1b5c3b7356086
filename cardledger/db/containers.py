"""
Container registry: decks and binders.

Every operation is scoped by an explicit owner id. A container owned by
someone else is indistinguishable from a missing one.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.errors import storage_guard
from cardledger.db.ledger import LedgerEngine, binder_ledger, deck_ledger
from cardledger.models.db import BinderDB, DeckDB
from cardledger.models.failure import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContainerSummary:
    """A container with the number of distinct ledger rows it holds."""

    container: Any
    card_count: int


class ContainerRegistry:
    """
    Lifecycle of one container kind.

    Args:
        model: ORM class of the container
        ledger: Ledger engine holding this container's rows
        editable_fields: Fields settable on create and update besides name
        newest_first: List by creation time (newest first) instead of by name
    """

    def __init__(
        self,
        model: type[Any],
        ledger: LedgerEngine,
        editable_fields: tuple[str, ...],
        newest_first: bool = False,
    ) -> None:
        self.model = model
        self.ledger = ledger
        self.editable_fields = editable_fields
        self.newest_first = newest_first

    @property
    def label(self) -> str:
        return self.ledger.table.label

    def _check_fields(self, fields: dict[str, Any]) -> None:
        unknown = set(fields) - set(self.editable_fields)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown field(s) for {self.label.lower()}: {sorted(unknown)}",
            )

    @storage_guard
    async def create(
        self, session: AsyncSession, owner_id: int, name: str | None, **fields: Any
    ) -> Any:
        """
        Create a container for an owner.

        Raises InvalidArgumentError if name is missing or blank.
        """
        if not name or not name.strip():
            raise InvalidArgumentError(f"{self.label} name is required.")
        self._check_fields(fields)

        container = self.model(owner_id=owner_id, name=name.strip(), **fields)
        session.add(container)
        await session.flush()
        logger.info("Created %s %d '%s'", self.label.lower(), container.id, container.name)
        return container

    @storage_guard
    async def get_by_id(self, session: AsyncSession, owner_id: int, container_id: int) -> Any:
        """
        Get an owner's container by id.

        Raises NotFoundError if it does not exist or belongs to another owner.
        """
        container = await session.get(self.model, container_id)
        if container is None or container.owner_id != owner_id:
            raise NotFoundError(f"{self.label} {container_id} not found.")
        return container

    @storage_guard
    async def get_by_exact_name(self, session: AsyncSession, owner_id: int, name: str) -> Any:
        """
        Get an owner's container by exact name.

        Names are not enforced unique; with duplicates an arbitrary one
        (the oldest) is returned. Use get_by_id to address a specific one.
        """
        result = await session.execute(
            select(self.model)
            .where(self.model.owner_id == owner_id, self.model.name == name)
            .order_by(self.model.id)
            .limit(1)
        )
        container = result.scalar_one_or_none()
        if container is None:
            raise NotFoundError(f"{self.label} '{name}' not found.")
        return container

    @storage_guard
    async def search_by_name(self, session: AsyncSession, owner_id: int, query: str) -> list[Any]:
        """Case-insensitive substring search on an owner's containers, ordered by name."""
        result = await session.execute(
            select(self.model)
            .where(
                self.model.owner_id == owner_id,
                self.model.name.icontains(query, autoescape=True),
            )
            .order_by(self.model.name, self.model.id)
        )
        return list(result.scalars().all())

    @storage_guard
    async def list_all(self, session: AsyncSession, owner_id: int) -> list[ContainerSummary]:
        """All containers of an owner with their distinct card counts."""
        row_model = self.ledger.table.row_model
        container_fk = getattr(row_model, self.ledger.table.container_column)

        stmt = (
            select(self.model, func.count(row_model.id))
            .outerjoin(row_model, container_fk == self.model.id)
            .where(self.model.owner_id == owner_id)
            .group_by(self.model.id)
        )
        if self.newest_first:
            stmt = stmt.order_by(self.model.created_at.desc(), self.model.id.desc())
        else:
            stmt = stmt.order_by(self.model.name, self.model.id)

        result = await session.execute(stmt)
        return [
            ContainerSummary(container=container, card_count=int(count))
            for container, count in result.all()
        ]

    @storage_guard
    async def update(
        self, session: AsyncSession, owner_id: int, container_id: int, **changes: Any
    ) -> Any:
        """
        Partially update a container.

        Fields passed as None keep their current value.
        """
        container = await self.get_by_id(session, owner_id, container_id)

        name = changes.pop("name", None)
        if name is not None:
            if not name.strip():
                raise InvalidArgumentError(f"{self.label} name cannot be blank.")
            container.name = name.strip()

        self._check_fields(changes)
        for field_name, value in changes.items():
            if value is not None:
                setattr(container, field_name, value)

        await session.flush()
        return container

    @storage_guard
    async def delete(self, session: AsyncSession, owner_id: int, container_id: int) -> Any:
        """
        Delete a container and all of its ledger rows.

        Both deletions happen in the caller's transaction.
        Returns the deleted container.
        """
        container = await self.get_by_id(session, owner_id, container_id)

        removed = await self.ledger.delete_by_container(session, container_id)
        await session.delete(container)
        await session.flush()

        logger.info(
            "Deleted %s %d '%s' with %d ledger row(s)",
            self.label.lower(),
            container_id,
            container.name,
            removed,
        )
        return container


decks = ContainerRegistry(
    DeckDB,
    deck_ledger,
    editable_fields=("description", "format"),
    newest_first=True,
)

binders = ContainerRegistry(
    BinderDB,
    binder_ledger,
    editable_fields=("description",),
)
