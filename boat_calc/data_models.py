"""Data models for the co-ownership calculator.

This module defines dataclasses representing the entities used by the
calculator: co-owner contributions, the financing parameters of a purchase,
the per-person breakdown and the aggregate financing result, plus the budget
estimate produced by the boat budget calculator. Using dataclasses makes it
easy to construct, inspect and serialize these structures.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class Contribution:
    """The upfront amount one co-owner paid toward the shared purchase.

    Attributes
    ----------
    identifier: int
        Stable key for the co-owner. It does not change when the name does.
    display_name: str
        Free-form label shown to users. Not required to be unique.
    amount: Decimal
        Non-negative upfront payment in kroner.
    """

    identifier: int
    display_name: str
    amount: Decimal


@dataclass(frozen=True)
class FinancingParameters:
    """Inputs of a single financing calculation.

    The purchase price is split evenly between co-owners. Any imbalance in
    upfront contributions is treated as an internal loan amortized over
    ``loan_term_years`` at ``annual_interest_rate_percent``.
    """

    purchase_price: Decimal
    annual_interest_rate_percent: Decimal  # e.g. Decimal("4.5") for 4.5 %
    loan_term_years: int


@dataclass
class PersonBreakdown:
    """Per co-owner result of a financing calculation.

    ``net_monthly_payment`` is positive when the person pays each month,
    negative when they receive money and zero when they are settled.
    ``monthly_payment`` is kept for display compatibility and is always zero;
    the loan installment lives on :class:`FinancingResult`.
    """

    identifier: int
    display_name: str
    amount: Decimal
    equal_share: Decimal
    excess_upfront: Decimal
    ownership_share: Decimal
    monthly_payment: Decimal = Decimal("0")
    monthly_credit: Decimal = Decimal("0")
    net_monthly_payment: Decimal = Decimal("0")
    months_to_break_even: int = 0

    @property
    def is_lender(self) -> bool:
        return self.excess_upfront > 0

    @property
    def is_borrower(self) -> bool:
        return self.excess_upfront < 0


@dataclass
class FinancingResult:
    """Aggregate output of the co-ownership amortizer."""

    total_upfront: Decimal
    internal_loan_amount: Decimal
    monthly_payment: Decimal  # installment of the internal loan, not per person
    total_interest: Decimal
    breakdown: List[PersonBreakdown]
    loan_term_years: int
    num_payments: int


@dataclass(frozen=True)
class BoatType:
    """Yearly running cost of a boat category, as a fraction of its price."""

    key: str
    label: str
    min_ratio: Decimal
    max_ratio: Decimal
    avg_ratio: Decimal


@dataclass
class BudgetEstimate:
    """Result of the budget calculator.

    ``max_price`` is the most expensive boat whose typical yearly running
    cost fits inside ``annual_budget``.
    """

    annual_budget: Decimal
    family_size: int
    boat_type: BoatType
    max_price: int
    annual_cost_per_person: Decimal
    monthly_cost_per_person: int
    search_url: str
