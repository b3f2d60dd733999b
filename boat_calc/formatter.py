"""Output helpers for the co-ownership calculator.

This module provides simple functions to render financing results and budget
estimates in a tabular text format. Amounts are printed as whole kroner with
space-grouped thousands, the way Norwegian prices are usually written.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable

from .data_models import BudgetEstimate, FinancingResult, PersonBreakdown


def format_kr(value, signed: bool = False) -> str:
    """Format an amount as whole kroner, e.g. ``750 000 kr``."""
    rounded = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    text = f"{abs(rounded):,}".replace(",", " ")
    if rounded < 0:
        text = "-" + text
    elif signed and rounded > 0:
        text = "+" + text
    return f"{text} kr"


def role_for(net_monthly_payment) -> str:
    if net_monthly_payment < 0:
        return "receives"
    if net_monthly_payment > 0:
        return "pays"
    return "settled"


def role_label(person: PersonBreakdown) -> str:
    return role_for(person.net_monthly_payment)


def print_financing_summary(result: FinancingResult) -> None:
    """Print the aggregate figures of a financing result."""
    print("Financing summary")
    print("-" * 72)
    print(f"Total upfront      : {format_kr(result.total_upfront)}")
    print(f"Internal loan      : {format_kr(result.internal_loan_amount)}")
    print(f"Monthly (internal) : {format_kr(result.monthly_payment)}")
    print(f"Total interest     : {format_kr(result.total_interest)}")
    if result.internal_loan_amount > 0:
        print(f"Settled after      : {result.loan_term_years} years ({result.num_payments} payments)")
    print("-" * 72)


def print_breakdown(breakdown: Iterable[PersonBreakdown]) -> None:
    """Print the per-person breakdown as a simple table."""
    headers = ["Name", "Share", "Upfront", "EqualShare", "Excess", "Credit", "NetMonthly", "Role"]
    print("\t".join(headers))
    for person in breakdown:
        row = [
            person.display_name,
            f"{person.ownership_share * 100:.1f}%",
            format_kr(person.amount),
            format_kr(person.equal_share),
            format_kr(person.excess_upfront),
            format_kr(person.monthly_credit, signed=True),
            format_kr(abs(person.net_monthly_payment)),
            role_label(person),
        ]
        print("\t".join(row))
        if person.months_to_break_even > 0:
            years = person.months_to_break_even / 12
            print(f"\tsettled after {person.months_to_break_even} months ({years:.1f} years)")


def print_budget(estimate: BudgetEstimate) -> None:
    """Print the result of the budget calculator."""
    kind = estimate.boat_type
    print("Budget")
    print("-" * 72)
    print(f"Boat type          : {kind.label} ({kind.min_ratio * 100:.0f}-{kind.max_ratio * 100:.0f}% per year)")
    print(f"Max purchase price : {format_kr(estimate.max_price)}")
    print(f"Yearly per person  : {format_kr(estimate.annual_cost_per_person)}")
    print(f"Monthly per person : {format_kr(estimate.monthly_cost_per_person)}")
    print(f"Search             : {estimate.search_url}")
    print("-" * 72)


def print_comparison(s1: Dict[str, object], s2: Dict[str, object]) -> None:
    """Print two financing summaries side by side.

    The difference column is scenario2 - scenario1; a negative value means the
    second scenario is cheaper for the borrowers.
    """
    print("Comparison")
    print("=" * 72)
    keys = [
        "internal_loan_amount",
        "monthly_payment",
        "total_interest",
        "num_payments",
    ]
    print(f"{'Metric':22s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1.get(key)
        v2 = s2.get(key)
        diff = v2 - v1
        print(f"{key:22s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)
