"""
Card Identity Resolution Service.

Turns a caller-supplied card reference into exactly one catalog row.
Shared by every mutation that accepts a flexible reference: deck and
binder add/remove, card update and card delete.

RESOLUTION ORDER:
1. A reference that looks like a card id is resolved by id (authoritative)
2. Otherwise every printing with exactly that name is considered
3. An optional set qualifier narrows the printings case-insensitively
4. Exactly one printing left -> resolved
5. None left -> NotFoundError
6. Several left -> AmbiguousCardError listing them (recoverable)
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.catalog import find_cards_by_exact_name, get_card_by_id
from cardledger.models.card import is_card_id
from cardledger.models.db import CardDB
from cardledger.models.failure import (
    AmbiguousCardError,
    CardCandidate,
    InvalidArgumentError,
    NotFoundError,
)


def to_candidate(card: CardDB) -> CardCandidate:
    """Describe a printing for an ambiguity report."""
    return CardCandidate(
        id=card.id,
        name=card.name,
        set_code=card.set_code,
        collector_number=card.collector_number,
        image_url=card.image_url,
    )


def choose_printing(name: str, printings: list[CardDB], set_code: str | None = None) -> CardDB:
    """
    Apply the disambiguation policy to the printings of one name.

    Args:
        name: The name that was looked up (for messages)
        printings: Every catalog row with exactly that name
        set_code: Optional set qualifier, compared case-insensitively

    Raises:
        NotFoundError: If no printing (in the requested set) exists
        AmbiguousCardError: If more than one printing remains
    """
    if set_code:
        wanted = set_code.strip().lower()
        printings = [card for card in printings if (card.set_code or "").lower() == wanted]
        if not printings:
            raise NotFoundError(
                f"Card '{name}' not found in set '{set_code}'.",
                suggestion="Check the set code, or omit it to list the available printings.",
            )

    if not printings:
        raise NotFoundError(
            f"Card '{name}' not found.",
            suggestion="Check the spelling, search the catalog, or add the card first.",
        )

    if len(printings) > 1:
        raise AmbiguousCardError(name, [to_candidate(card) for card in printings])

    return printings[0]


async def resolve_card(
    session: AsyncSession,
    reference: str,
    set_code: str | None = None,
) -> CardDB:
    """
    Resolve a reference (id or exact name) to one catalog card.

    Raises:
        InvalidArgumentError: If the reference is blank
        NotFoundError: If nothing matches
        AmbiguousCardError: If the name matches several printings
    """
    if not reference or not reference.strip():
        raise InvalidArgumentError("A card id or card name is required.")
    reference = reference.strip()

    if is_card_id(reference):
        card = await get_card_by_id(session, reference.lower())
        if card is None:
            raise NotFoundError(
                f"Card id '{reference}' not found.",
                suggestion="Check the id, or use the card name.",
            )
        return card

    printings = await find_cards_by_exact_name(session, reference)
    return choose_printing(reference, printings, set_code)


@dataclass(frozen=True, slots=True)
class CardReference:
    """
    A card as named by a caller: by id, or by exact name plus optional set.

    card_id wins when both are given.
    """

    card_id: str | None = None
    card_name: str | None = None
    set_code: str | None = None

    @classmethod
    def parse(cls, reference: str, set_code: str | None = None) -> "CardReference":
        """Build a reference from a single string that may be an id or a name."""
        if is_card_id(reference):
            return cls(card_id=reference.strip())
        return cls(card_name=reference, set_code=set_code)


async def resolve_card_reference(session: AsyncSession, ref: CardReference) -> CardDB:
    """
    Resolve a structured reference.

    An explicit card_id must have the id format.

    Raises:
        InvalidArgumentError: If neither id nor name is given, or card_id is malformed
        NotFoundError / AmbiguousCardError: As for resolve_card
    """
    if ref.card_id:
        if not is_card_id(ref.card_id):
            raise InvalidArgumentError(
                f"Malformed card id '{ref.card_id}'.",
                suggestion="Card ids are UUIDs; use card_name to look up by name.",
            )
        return await resolve_card(session, ref.card_id)

    if ref.card_name and ref.card_name.strip():
        return await resolve_card(session, ref.card_name, ref.set_code)

    raise InvalidArgumentError(
        "card_id or card_name is required.",
        suggestion="Provide a card id or an exact card name.",
    )
