"""Core calculation engine for the co-ownership calculator.

This module implements the financial logic behind a shared purchase. Every
co-owner owns an equal share of the boat, but upfront contributions are
rarely equal. Whoever paid more than their share lends the difference to whoever
paid less, and the internal loan is amortized monthly with interest over the
loan term. The module also contains the yearly budget calculator used to find
the most expensive boat a group can afford to run.
"""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal, DecimalException, getcontext
from typing import Dict, List, Sequence, Union

from .data_models import (
    BoatType,
    BudgetEstimate,
    Contribution,
    FinancingParameters,
    FinancingResult,
    PersonBreakdown,
)

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, str]

BOAT_TYPES: Dict[str, BoatType] = {
    "motorboat": BoatType("motorboat", "Motorboat/Cabin cruiser", Decimal("0.06"), Decimal("0.08"), Decimal("0.07")),
    "sailboat": BoatType("sailboat", "Sailboat", Decimal("0.05"), Decimal("0.07"), Decimal("0.06")),
    "speedboat": BoatType("speedboat", "Speedboat/Bowrider", Decimal("0.07"), Decimal("0.09"), Decimal("0.08")),
    "fishing": BoatType("fishing", "Fishing/Aluminium boat", Decimal("0.04"), Decimal("0.06"), Decimal("0.05")),
}

FINN_SEARCH_BASE = "https://www.finn.no/mobility/search/boat"


class FinancingInputError(ValueError):
    """Raised when a financing calculation cannot be performed at all."""


class EmptyOwnerSetError(FinancingInputError):
    """No contributions were supplied, so there is no equal share."""


class NonPositiveTermError(FinancingInputError):
    """The loan term is zero or negative, so there are no payments."""


class UnrepresentableLoanError(FinancingInputError):
    """The installment is too large or too small for decimal arithmetic."""


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is not positive,
    or so small that ``1 + i`` rounds to 1, the payment is the straight-line
    ``P / n``.
    """
    if term <= 0:
        raise NonPositiveTermError("Term must be positive")
    if rate_per_month <= 0:
        return principal / Decimal(term)
    try:
        factor = (1 + rate_per_month) ** term
        if factor == 1:
            return principal / Decimal(term)
        return principal * (rate_per_month * factor) / (factor - 1)
    except DecimalException as exc:
        raise UnrepresentableLoanError(
            f"Cannot amortize over {term} payments at {rate_per_month} per month"
        ) from exc


def _base_breakdown(contribution: Contribution, equal_share: Decimal, ownership_share: Decimal) -> PersonBreakdown:
    return PersonBreakdown(
        identifier=contribution.identifier,
        display_name=contribution.display_name,
        amount=contribution.amount,
        equal_share=equal_share,
        excess_upfront=contribution.amount - equal_share,
        ownership_share=ownership_share,
    )


def compute_financing(params: FinancingParameters, contributions: Sequence[Contribution]) -> FinancingResult:
    """Split a shared purchase evenly and amortize the contribution imbalance.

    Parameters
    ----------
    params: FinancingParameters
        Purchase price, annual interest rate in percent and loan term in
        years. Only the term is validated; a negative price or rate flows
        through the arithmetic unchanged.
    contributions: Sequence[Contribution]
        One entry per co-owner. Order is preserved in the breakdown.

    Returns
    -------
    FinancingResult
        Totals for the internal loan and one ``PersonBreakdown`` per
        contribution. Lenders have a negative ``net_monthly_payment`` (they
        receive money); borrowers have a positive one.

    Raises
    ------
    EmptyOwnerSetError
        If ``contributions`` is empty.
    NonPositiveTermError
        If ``params.loan_term_years`` is zero or negative.
    UnrepresentableLoanError
        If the installment overflows decimal arithmetic (e.g. an absurd term).
    """
    if not contributions:
        raise EmptyOwnerSetError("At least one contribution is required")
    if params.loan_term_years <= 0:
        raise NonPositiveTermError("Loan term must be a positive number of years")

    owner_count = Decimal(len(contributions))
    equal_share = params.purchase_price / owner_count
    ownership_share = Decimal(1) / owner_count
    total_upfront = sum((c.amount for c in contributions), Decimal("0"))
    num_payments = params.loan_term_years * 12

    breakdown = [_base_breakdown(c, equal_share, ownership_share) for c in contributions]
    lenders = [p for p in breakdown if p.is_lender]
    borrowers = [p for p in breakdown if p.is_borrower]

    if not lenders or not borrowers:
        # Everyone paid exactly their share, or nobody is on the other side
        logger.debug("No internal loan needed for %d owner(s)", len(breakdown))
        return FinancingResult(
            total_upfront=total_upfront,
            internal_loan_amount=Decimal("0"),
            monthly_payment=Decimal("0"),
            total_interest=Decimal("0"),
            breakdown=breakdown,
            loan_term_years=params.loan_term_years,
            num_payments=num_payments,
        )

    total_lent = sum((p.excess_upfront for p in lenders), Decimal("0"))
    total_borrowed = sum((abs(p.excess_upfront) for p in borrowers), Decimal("0"))
    # Only the smaller side is financed; any surplus on the larger side is left as is
    loan_amount = min(total_lent, total_borrowed)

    rate_per_month = params.annual_interest_rate_percent / Decimal(100) / Decimal(12)
    payment = _calculate_annuity_payment(loan_amount, rate_per_month, num_payments)
    total_interest = payment * num_payments - loan_amount

    for person in breakdown:
        if person.is_lender:
            person.monthly_credit = person.excess_upfront / total_lent * payment
            person.net_monthly_payment = -person.monthly_credit
            person.months_to_break_even = num_payments
        elif person.is_borrower:
            person.net_monthly_payment = abs(person.excess_upfront) / total_borrowed * payment
            person.months_to_break_even = num_payments

    logger.debug(
        "Internal loan %s over %d payments: installment %s, interest %s",
        loan_amount,
        num_payments,
        payment,
        total_interest,
    )
    return FinancingResult(
        total_upfront=total_upfront,
        internal_loan_amount=loan_amount,
        monthly_payment=payment,
        total_interest=total_interest,
        breakdown=breakdown,
        loan_term_years=params.loan_term_years,
        num_payments=num_payments,
    )


def compute(
    purchase_price: Number,
    contributions: Sequence[Contribution],
    annual_interest_rate_percent: Number,
    loan_term_years: int,
) -> FinancingResult:
    """Convenience wrapper around :func:`compute_financing` taking plain values."""
    params = FinancingParameters(
        purchase_price=Decimal(str(purchase_price)),
        annual_interest_rate_percent=Decimal(str(annual_interest_rate_percent)),
        loan_term_years=int(loan_term_years),
    )
    return compute_financing(params, contributions)


def finn_search_url(max_price: int, min_price: int = 0) -> str:
    """Return a finn.no boat search URL for the given price range."""
    return (
        f"{FINN_SEARCH_BASE}?no_of_seats_from=8&price_from={min_price}"
        f"&price_to={max_price}&sales_form=120&sales_form=121"
    )


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def compute_budget(annual_budget: Decimal, family_size: int, boat_type: str) -> BudgetEstimate:
    """Estimate the most expensive boat a group can afford to keep.

    The yearly running cost of a boat (mooring, insurance, maintenance, fuel)
    is assumed to be a fixed fraction of its price, depending on the type of
    boat. The maximum price is the budget divided by that fraction.
    """
    if family_size < 1:
        raise ValueError("Family size must be at least 1")
    try:
        kind = BOAT_TYPES[boat_type.lower()]
    except KeyError:
        raise ValueError(f"Unknown boat type: {boat_type}") from None

    max_price = _floor(annual_budget / kind.avg_ratio)
    annual_per_person = annual_budget / Decimal(family_size)
    monthly_per_person = _floor(annual_per_person / Decimal(12))
    return BudgetEstimate(
        annual_budget=annual_budget,
        family_size=family_size,
        boat_type=kind,
        max_price=max_price,
        annual_cost_per_person=annual_per_person,
        monthly_cost_per_person=monthly_per_person,
        search_url=finn_search_url(max_price),
    )


def cost_per_person(price: Decimal, family_size: int) -> int:
    """Return each person's whole-kroner share of a boat price."""
    if family_size < 1:
        raise ValueError("Family size must be at least 1")
    return _floor(price / Decimal(family_size))


def summarize(result: FinancingResult) -> Dict[str, object]:
    """Return a JSON-serialisable summary of a financing result."""
    return {
        "total_upfront": float(result.total_upfront),
        "internal_loan_amount": float(result.internal_loan_amount),
        "monthly_payment": float(result.monthly_payment),
        "total_interest": float(result.total_interest),
        "loan_term_years": result.loan_term_years,
        "num_payments": result.num_payments,
    }


def serialize_breakdown(result: FinancingResult) -> List[Dict[str, object]]:
    """Convert breakdown rows into JSON-serialisable dictionaries."""
    return [
        {
            "id": p.identifier,
            "name": p.display_name,
            "amount": float(p.amount),
            "equal_share": float(p.equal_share),
            "excess_upfront": float(p.excess_upfront),
            "ownership_share": float(p.ownership_share),
            "monthly_credit": float(p.monthly_credit),
            "net_monthly_payment": float(p.net_monthly_payment),
            "months_to_break_even": p.months_to_break_even,
        }
        for p in result.breakdown
    ]
