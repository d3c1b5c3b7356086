"""Tests for card domain models."""

import pytest

from cardledger.models.card import CardCondition, CardMetadata, CardUpdate, CardUsage, NewCard
from cardledger.models.failure import InvalidArgumentError


class TestCardCondition:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("NM", CardCondition.NEAR_MINT),
            ("nm", CardCondition.NEAR_MINT),
            (" dmg ", CardCondition.DAMAGED),
            ("M", CardCondition.MINT),
        ],
    )
    def test_parse(self, raw: str, expected: CardCondition) -> None:
        assert CardCondition.parse(raw) is expected

    def test_unknown_grade(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            CardCondition.parse("EX")

        assert "NM" in exc_info.value.suggestion


class TestCardUpdate:
    def test_changes_skip_none(self) -> None:
        update = CardUpdate(usd_price="1.00", catalog_data={"a": 1})

        assert update.changes() == {"usd_price": "1.00", "catalog_data": {"a": 1}}

    def test_empty_update(self) -> None:
        assert CardUpdate().changes() == {}


class TestNewCard:
    def test_from_metadata(self) -> None:
        data = CardMetadata(
            id="abc",
            name="Shock",
            set_code="m19",
            collector_number="156",
            usd_price="0.10",
            raw_data={"id": "abc"},
        )

        card = NewCard.from_metadata(data)

        assert card.id == "abc"
        assert card.usd_price == "0.10"
        assert card.eur_price is None
        assert card.catalog_data == {"id": "abc"}


def test_card_usage() -> None:
    assert CardUsage(deck_rows=0, binder_rows=0).in_use is False
    assert CardUsage(deck_rows=1, binder_rows=2).total == 3
