from decimal import Decimal

import pytest

from boat_calc.engine import BOAT_TYPES, compute_budget, cost_per_person, finn_search_url


class TestComputeBudget:

    def test_motorboat_for_four(self):
        estimate = compute_budget(Decimal("50000"), 4, "motorboat")
        assert estimate.max_price == 714285
        assert estimate.annual_cost_per_person == Decimal("12500")
        assert estimate.monthly_cost_per_person == 1041
        assert estimate.boat_type is BOAT_TYPES["motorboat"]

    @pytest.mark.parametrize(
        "boat_type,expected",
        [("sailboat", 833333), ("speedboat", 625000), ("fishing", 1000000)],
    )
    def test_max_price_per_type(self, boat_type, expected):
        assert compute_budget(Decimal("50000"), 2, boat_type).max_price == expected

    def test_boat_type_is_case_insensitive(self):
        assert compute_budget(Decimal("50000"), 2, "Sailboat").boat_type.key == "sailboat"

    def test_search_url_uses_max_price(self):
        estimate = compute_budget(Decimal("50000"), 4, "motorboat")
        assert estimate.search_url == finn_search_url(714285)
        assert "price_to=714285" in estimate.search_url

    def test_unknown_boat_type(self):
        with pytest.raises(ValueError, match="Unknown boat type"):
            compute_budget(Decimal("50000"), 4, "submarine")

    def test_family_size_must_be_positive(self):
        with pytest.raises(ValueError, match="at least 1"):
            compute_budget(Decimal("50000"), 0, "motorboat")


class TestFinnSearchUrl:

    def test_full_url(self):
        assert finn_search_url(500000, 100000) == (
            "https://www.finn.no/mobility/search/boat?no_of_seats_from=8"
            "&price_from=100000&price_to=500000&sales_form=120&sales_form=121"
        )


class TestCostPerPerson:

    def test_rounds_down(self):
        assert cost_per_person(Decimal("1000000"), 3) == 333333

    def test_requires_people(self):
        with pytest.raises(ValueError):
            cost_per_person(Decimal("1000"), 0)
