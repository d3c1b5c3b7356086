"""
Card domain models.

Plain value objects passed between the catalog, the resolver and the
card-metadata provider. All models are frozen.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cardledger.models.failure import InvalidArgumentError

# Provider ids and locally generated ids are both canonical UUID text
_CARD_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_card_id(reference: str) -> bool:
    """True if the reference has the shape of a catalog card id."""
    return bool(_CARD_ID_PATTERN.match(reference.strip()))


class CardCondition(str, Enum):
    """Physical grade of a binder copy."""

    MINT = "M"
    NEAR_MINT = "NM"
    LIGHTLY_PLAYED = "LP"
    MODERATELY_PLAYED = "MP"
    HEAVILY_PLAYED = "HP"
    DAMAGED = "DMG"

    @classmethod
    def parse(cls, value: str) -> "CardCondition":
        """Parse a grade code, case-insensitively."""
        try:
            return cls(value.strip().upper())
        except ValueError as e:
            valid = ", ".join(c.value for c in cls)
            raise InvalidArgumentError(
                f"Unknown condition '{value}'.",
                suggestion=f"Use one of: {valid}",
            ) from e


@dataclass(frozen=True, slots=True)
class CardMetadata:
    """
    Card printing as reported by the card-metadata provider.

    Attributes:
        id: Provider-issued id, reused as the catalog id
        name: Canonical card name
        set_code: Set code of the printing
        collector_number: Collector number within the set
        image_url: Normal-size image, if the provider has one
        usd_price: USD price string, verbatim
        eur_price: EUR price string, verbatim
        raw_data: Full provider payload
    """

    id: str
    name: str
    set_code: str | None
    collector_number: str | None
    image_url: str | None = None
    usd_price: str | None = None
    eur_price: str | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class NewCard:
    """
    Data for creating a catalog card.

    id is generated when not supplied.
    """

    name: str
    set_code: str | None = None
    collector_number: str | None = None
    id: str | None = None
    image_url: str | None = None
    usd_price: str | None = None
    eur_price: str | None = None
    catalog_data: dict[str, Any] | None = None

    @classmethod
    def from_metadata(cls, metadata: CardMetadata) -> "NewCard":
        return cls(
            id=metadata.id,
            name=metadata.name,
            set_code=metadata.set_code,
            collector_number=metadata.collector_number,
            image_url=metadata.image_url,
            usd_price=metadata.usd_price,
            eur_price=metadata.eur_price,
            catalog_data=metadata.raw_data,
        )


@dataclass(frozen=True, slots=True)
class CardUpdate:
    """
    Partial update of a card's descriptive fields.

    A None field leaves the stored value untouched.
    """

    image_url: str | None = None
    usd_price: str | None = None
    eur_price: str | None = None
    catalog_data: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually supplied."""
        values = {
            "image_url": self.image_url,
            "usd_price": self.usd_price,
            "eur_price": self.eur_price,
            "catalog_data": self.catalog_data,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True, slots=True)
class CardUsage:
    """How many ledger rows reference a card."""

    deck_rows: int
    binder_rows: int

    @property
    def total(self) -> int:
        return self.deck_rows + self.binder_rows

    @property
    def in_use(self) -> bool:
        return self.total > 0
