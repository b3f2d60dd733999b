from decimal import Decimal

import pytest

from boat_calc.data_models import Contribution
from boat_calc.utils import (
    decimal_from_str,
    parse_amount,
    parse_contribution,
    resize_contributions,
)


class TestDecimalFromStr:

    def test_strips_grouping(self):
        assert decimal_from_str("750,000") == Decimal("750000")
        assert decimal_from_str("750 000") == Decimal("750000")
        assert decimal_from_str("750\u00a0000") == Decimal("750000")

    @pytest.mark.parametrize("value", ["", "abc", "nan", "inf"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid numeric value"):
            decimal_from_str(value)


class TestParseAmount:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("500000", Decimal("500000")),
            ("500k", Decimal("500000")),
            ("1.5M", Decimal("1500000")),
            ("750 000 kr", Decimal("750000")),
            (" 12.5 ", Decimal("12.5")),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_amount(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_amount("lots")


class TestParseContribution:

    def test_named(self):
        c = parse_contribution("Anna:500k", 1)
        assert c == Contribution(identifier=1, display_name="Anna", amount=Decimal("500000"))

    def test_bare_amount_gets_default_name(self):
        c = parse_contribution("300000", 2)
        assert c.display_name == "Person 2"
        assert c.amount == Decimal("300000")

    def test_name_may_contain_colon(self):
        c = parse_contribution("Team: Ola:100", 3)
        assert c.display_name == "Team: Ola"
        assert c.amount == Decimal("100")

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            parse_contribution("Anna:-5", 1)


class TestResizeContributions:

    def test_appends_defaults(self, contributions):
        resized = resize_contributions(contributions(100, 200), 4)
        assert [c.identifier for c in resized] == [1, 2, 3, 4]
        assert resized[2] == Contribution(3, "Person 3", Decimal("0"))
        assert resized[0].amount == Decimal("100")

    def test_truncates(self, contributions):
        resized = resize_contributions(contributions(100, 200, 300), 2)
        assert [c.amount for c in resized] == [Decimal("100"), Decimal("200")]

    def test_same_size_is_unchanged(self, contributions):
        items = contributions(100, 200)
        assert resize_contributions(items, 2) == items

    def test_input_not_mutated(self, contributions):
        items = contributions(100)
        resize_contributions(items, 3)
        assert len(items) == 1

    @pytest.mark.parametrize("count", [0, -1])
    def test_requires_an_owner(self, count):
        with pytest.raises(ValueError, match="At least one"):
            resize_contributions([], count)
