"""
Tests for card identity resolution.

Covers id-first resolution, exact-name lookup, set disambiguation and
the ambiguity report returned when a name has several printings.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.models.failure import (
    AmbiguousCardError,
    FailureKind,
    InvalidArgumentError,
    NotFoundError,
)
from cardledger.services.card_resolver import (
    CardReference,
    is_card_id,
    resolve_card,
    resolve_card_reference,
)
from tests.factories import BOLT_A_ID, BOLT_B_ID, SHOCK_ID, CardFactory


class TestIsCardId:
    def test_uuid_is_id(self) -> None:
        assert is_card_id(BOLT_A_ID)
        assert is_card_id(BOLT_A_ID.upper())
        assert is_card_id(f"  {BOLT_A_ID} ")

    def test_names_are_not_ids(self) -> None:
        assert not is_card_id("Lightning Bolt")
        assert not is_card_id("not-a-uuid")
        assert not is_card_id(BOLT_A_ID[:-1])


class TestResolveById:
    async def test_id_resolves_directly(self, session: AsyncSession, two_bolts) -> None:
        """An id wins even when the name is ambiguous."""
        card = await resolve_card(session, BOLT_A_ID)

        assert card.id == BOLT_A_ID

    async def test_id_ignores_set_qualifier(self, session: AsyncSession, two_bolts) -> None:
        card = await resolve_card(session, BOLT_A_ID, set_code="b")

        assert card.id == BOLT_A_ID

    async def test_uppercase_id(self, session: AsyncSession, two_bolts) -> None:
        card = await resolve_card(session, BOLT_B_ID.upper())

        assert card.id == BOLT_B_ID

    async def test_unknown_id(self, session: AsyncSession, two_bolts) -> None:
        with pytest.raises(NotFoundError):
            await resolve_card(session, SHOCK_ID)


class TestResolveByName:
    async def test_single_printing(self, session: AsyncSession, make_card: CardFactory) -> None:
        shock = await make_card("Shock", "m19", "156", card_id=SHOCK_ID)

        card = await resolve_card(session, "Shock")

        assert card.id == shock.id

    async def test_ambiguous_name(self, session: AsyncSession, two_bolts) -> None:
        """Two printings and no set: the caller gets both back."""
        with pytest.raises(AmbiguousCardError) as exc_info:
            await resolve_card(session, "Bolt")

        error = exc_info.value
        assert error.kind == FailureKind.AMBIGUOUS
        assert {c.id for c in error.candidates} == {BOLT_A_ID, BOLT_B_ID}
        assert {c.set_code for c in error.candidates} == {"a", "b"}
        assert "2 printings" in error.message

    async def test_ambiguity_report_serializes_candidates(
        self, session: AsyncSession, two_bolts
    ) -> None:
        with pytest.raises(AmbiguousCardError) as exc_info:
            await resolve_card(session, "Bolt")

        detail = exc_info.value.to_detail()
        assert detail.candidates is not None
        assert detail.candidates[0]["image_url"] == "https://img/a.jpg"

    async def test_set_disambiguates(self, session: AsyncSession, two_bolts) -> None:
        card = await resolve_card(session, "Bolt", set_code="b")

        assert card.id == BOLT_B_ID

    async def test_set_is_case_insensitive(self, session: AsyncSession, two_bolts) -> None:
        card = await resolve_card(session, "Bolt", set_code="A")

        assert card.id == BOLT_A_ID

    async def test_wrong_set(self, session: AsyncSession, two_bolts) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await resolve_card(session, "Bolt", set_code="zzz")

        assert "zzz" in exc_info.value.message

    async def test_name_is_exact(self, session: AsyncSession, two_bolts) -> None:
        """Partial or differently-cased names do not resolve."""
        with pytest.raises(NotFoundError):
            await resolve_card(session, "bolt")
        with pytest.raises(NotFoundError):
            await resolve_card(session, "Bol")

    async def test_two_printings_in_one_set(
        self, session: AsyncSession, make_card: CardFactory
    ) -> None:
        """A set that holds two printings of the name is still ambiguous."""
        await make_card("Forest", "m19", "277")
        await make_card("Forest", "m19", "278")

        with pytest.raises(AmbiguousCardError):
            await resolve_card(session, "Forest", set_code="m19")

    async def test_blank_reference(self, session: AsyncSession) -> None:
        with pytest.raises(InvalidArgumentError):
            await resolve_card(session, "   ")


class TestCardReference:
    def test_parse_id(self) -> None:
        ref = CardReference.parse(BOLT_A_ID, set_code="a")

        assert ref.card_id == BOLT_A_ID
        assert ref.card_name is None

    def test_parse_name(self) -> None:
        ref = CardReference.parse("Bolt", set_code="a")

        assert ref == CardReference(card_name="Bolt", set_code="a")

    async def test_card_id_wins(self, session: AsyncSession, two_bolts) -> None:
        ref = CardReference(card_id=BOLT_B_ID, card_name="Bolt", set_code="a")

        card = await resolve_card_reference(session, ref)

        assert card.id == BOLT_B_ID

    async def test_malformed_card_id(self, session: AsyncSession, two_bolts) -> None:
        with pytest.raises(InvalidArgumentError):
            await resolve_card_reference(session, CardReference(card_id="Bolt"))

    async def test_missing_reference(self, session: AsyncSession) -> None:
        with pytest.raises(InvalidArgumentError):
            await resolve_card_reference(session, CardReference())

    async def test_name_with_set(self, session: AsyncSession, two_bolts) -> None:
        card = await resolve_card_reference(session, CardReference(card_name="Bolt", set_code="a"))

        assert card.id == BOLT_A_ID
