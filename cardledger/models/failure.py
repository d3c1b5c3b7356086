"""
Failure classification for core operations.

Every failure the core reports is a CardLedgerError carrying a FailureKind.
The core never decides how a kind is presented to a user; the HTTP layer
owns that mapping (see cardledger.api.errors).

Kinds:
- NOT_FOUND: referenced card, container or ledger row is absent
- AMBIGUOUS: a card name matches several printings and no set narrowed it
- CONFLICT: duplicate creation, or deletion blocked by references
- INVALID_ARGUMENT: missing field, bad quantity, malformed identifier
- UPSTREAM_UNAVAILABLE: the card-metadata provider failed or had no match
- INTERNAL: unexpected storage failure
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    CONFLICT = "conflict"
    INVALID_ARGUMENT = "invalid_argument"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class CardCandidate:
    """
    One printing offered back to the caller when a name is ambiguous.

    Attributes:
        id: Catalog id of the printing
        name: Card name
        set_code: Set the printing belongs to
        collector_number: Collector number within the set
        image_url: Image of the printing, if known
    """

    id: str
    name: str
    set_code: str | None
    collector_number: str | None = None
    image_url: str | None = None


class FailureDetail(BaseModel):
    """Serializable description of a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )
    candidates: list[dict[str, Any]] | None = Field(
        default=None,
        description="Printings to choose from when a card name is ambiguous",
    )


class CardLedgerError(Exception):
    """
    Base class for failures the core knows how to explain.

    Subclasses fix the kind; callers only pick the message.
    """

    kind: FailureKind = FailureKind.INTERNAL

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class NotFoundError(CardLedgerError):
    kind = FailureKind.NOT_FOUND


class ConflictError(CardLedgerError):
    """
    Raised on duplicate creation or a deletion blocked by references.

    `existing` optionally carries the record that caused the conflict.
    """

    kind = FailureKind.CONFLICT

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        existing: Any = None,
    ):
        super().__init__(message, detail=detail, suggestion=suggestion)
        self.existing = existing


class InvalidArgumentError(CardLedgerError):
    kind = FailureKind.INVALID_ARGUMENT


class InternalError(CardLedgerError):
    kind = FailureKind.INTERNAL


class UpstreamUnavailableError(CardLedgerError):
    """
    Raised when the card-metadata provider cannot answer.

    `retryable` is False when the provider answered but did not know the card.
    """

    kind = FailureKind.UPSTREAM_UNAVAILABLE

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        retryable: bool = True,
    ):
        super().__init__(message, detail=detail, suggestion=suggestion)
        self.retryable = retryable


class AmbiguousCardError(CardLedgerError):
    """
    Raised when a card name matches more than one printing.

    Recoverable: the caller re-issues the request with one of the
    candidates' set codes (or its id).
    """

    kind = FailureKind.AMBIGUOUS

    def __init__(self, name: str, candidates: list[CardCandidate]):
        self.name = name
        self.candidates = candidates
        sets = ", ".join(sorted({c.set_code or "?" for c in candidates}))
        super().__init__(
            message=f"'{name}' matches {len(candidates)} printings.",
            detail=f"Sets: {sets}",
            suggestion="Repeat the request with a set code or a card id.",
        )

    def to_detail(self) -> FailureDetail:
        detail = super().to_detail()
        detail.candidates = [
            {
                "id": c.id,
                "name": c.name,
                "set_code": c.set_code,
                "collector_number": c.collector_number,
                "image_url": c.image_url,
            }
            for c in self.candidates
        ]
        return detail
