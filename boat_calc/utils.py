"""Utility functions for the co-ownership calculator.

This module provides helpers for parsing user input into Python data types and
for keeping the list of co-owner contributions in step with the number of
people sharing the purchase.
"""

from __future__ import annotations

from decimal import Decimal, getcontext
from typing import List, Sequence

from .data_models import Contribution

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and spaces and handles both integer and
    float-like strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = str(value).replace(",", "").replace(" ", "").replace("\u00a0", "")
        result = Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a kroner amount with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g. "500k" meaning 500 000). A trailing ``kr`` is ignored.
    """
    text = str(value).strip().lower()
    if text.endswith("kr"):
        text = text[:-2].strip()
    factor = Decimal("1")
    if text.endswith("k"):
        factor = Decimal("1000")
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal("1000000")
        text = text[:-1]
    return decimal_from_str(text) * factor


def default_contribution(index: int) -> Contribution:
    """Return the placeholder contribution for the person at ``index`` (0-based)."""
    return Contribution(identifier=index + 1, display_name=f"Person {index + 1}", amount=Decimal("0"))


def resize_contributions(contributions: Sequence[Contribution], owner_count: int) -> List[Contribution]:
    """Return a contribution list with exactly ``owner_count`` entries.

    Existing entries are kept in order. Missing people are appended with a
    zero contribution and a ``"Person N"`` name; surplus entries are dropped
    from the end.
    """
    if owner_count < 1:
        raise ValueError("At least one co-owner is required")
    current = list(contributions[:owner_count])
    for i in range(len(current), owner_count):
        current.append(default_contribution(i))
    return current


def parse_contribution(text: str, identifier: int) -> Contribution:
    """Parse a ``NAME:AMOUNT`` or bare ``AMOUNT`` string into a contribution.

    A missing name falls back to ``"Person <identifier>"``. Negative amounts
    are rejected.
    """
    name, sep, amount_str = text.rpartition(":")
    if not sep:
        amount_str = text
    name = name.strip() or f"Person {identifier}"
    amount = parse_amount(amount_str)
    if amount < 0:
        raise ValueError(f"Contribution must be non-negative; got {amount_str.strip()}")
    return Contribution(identifier=identifier, display_name=name, amount=amount)
