"""Command-line interface for the co-ownership calculator.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute the internal financing between co-owners, estimate how
expensive a boat the group can afford, or compare two financing scenarios.
Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import click

from .data_models import Contribution, FinancingParameters, FinancingResult
from .engine import (
    BOAT_TYPES,
    FinancingInputError,
    compute_budget,
    compute_financing,
    serialize_breakdown,
    summarize,
)
from .formatter import print_breakdown, print_budget, print_comparison, print_financing_summary
from .utils import decimal_from_str, parse_amount, parse_contribution, resize_contributions


def parse_contribution_strings(values: Sequence[str]) -> List[Contribution]:
    contributions: List[Contribution] = []
    for i, item in enumerate(values):
        try:
            contributions.append(parse_contribution(item, i + 1))
        except ValueError as exc:
            raise click.BadParameter(
                f"Contribution must be in NAME:AMOUNT or AMOUNT format; got {item} ({exc})"
            )
    return contributions


def build_financing_from_options(
    price: str,
    rate: float,
    years: int,
    owners: Optional[int],
    contribution: Sequence[str],
) -> Tuple[FinancingParameters, List[Contribution]]:
    """Turn raw option values into engine inputs.

    When ``owners`` is given the contribution list is padded with zero
    contributions (or truncated) to exactly that many people.
    """
    try:
        price_value = parse_amount(price)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    contributions = parse_contribution_strings(contribution)
    if owners is not None:
        try:
            contributions = resize_contributions(contributions, owners)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    params = FinancingParameters(
        purchase_price=price_value,
        annual_interest_rate_percent=decimal_from_str(str(rate)),
        loan_term_years=years,
    )
    return params, contributions


def run_financing(params: FinancingParameters, contributions: List[Contribution]) -> FinancingResult:
    try:
        return compute_financing(params, contributions)
    except (FinancingInputError, ArithmeticError) as exc:
        raise click.UsageError(str(exc))


def export_to_json(path: Path, result: FinancingResult) -> None:
    """Export summary and breakdown to a JSON file."""
    data = {"summary": summarize(result), "breakdown": serialize_breakdown(result)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: FinancingResult) -> None:
    """Export the per-person breakdown to a CSV file."""
    header = [
        "Id",
        "Name",
        "Upfront",
        "Equal_Share",
        "Excess_Upfront",
        "Ownership_Share",
        "Monthly_Credit",
        "Net_Monthly_Payment",
        "Months_To_Break_Even",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in serialize_breakdown(result):
            writer.writerow(
                [
                    row["id"],
                    row["name"],
                    row["amount"],
                    row["equal_share"],
                    row["excess_upfront"],
                    row["ownership_share"],
                    row["monthly_credit"],
                    row["net_monthly_payment"],
                    row["months_to_break_even"],
                ]
            )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Plan a shared boat purchase: budget and internal financing."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--price", "-p", "price", required=True, help="Purchase price (e.g. 750000 or 750k)")
@click.option("--rate", "-r", "rate", type=float, default=4.5, show_default=True, help="Annual interest rate (percent)")
@click.option("--years", "-y", "years", type=int, default=5, show_default=True, help="Years to settle the internal loan")
@click.option("--owners", "-n", "owners", type=int, help="Number of co-owners (pads or truncates contributions)")
@click.option("--contribution", "-c", "contribution", multiple=True, help="Upfront contribution in NAME:AMOUNT format")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def financing(
    price: str,
    rate: float,
    years: int,
    owners: Optional[int],
    contribution: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Compute who pays whom each month to even out upfront contributions."""
    params, contributions = build_financing_from_options(price, rate, years, owners, contribution)
    result = run_financing(params, contributions)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Financing exported to {path}")
    else:
        print_financing_summary(result)
        print_breakdown(result.breakdown)


@cli.command()
@click.option("--budget", "-b", "budget", required=True, help="Total yearly budget for running the boat")
@click.option("--owners", "-n", "owners", type=int, default=4, show_default=True, help="Number of people sharing")
@click.option(
    "--boat-type",
    "boat_type",
    type=click.Choice(sorted(BOAT_TYPES)),
    default="motorboat",
    show_default=True,
    help="Kind of boat",
)
def budget(budget: str, owners: int, boat_type: str) -> None:
    """Estimate the most expensive boat the group can afford to keep."""
    try:
        estimate = compute_budget(parse_amount(budget), owners, boat_type)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    print_budget(estimate)


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Map a quoted option string onto :func:`build_financing_from_options` arguments."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {
        "price": None,
        "rate": 4.5,
        "years": 5,
        "owners": None,
        "contribution": [],
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {token} in scenario is missing a value")
        i += 1
        value = tokens[i]
        try:
            if token in ("-p", "--price"):
                params["price"] = value
            elif token in ("-r", "--rate"):
                params["rate"] = float(value)
            elif token in ("-y", "--years"):
                params["years"] = int(value)
            elif token in ("-n", "--owners"):
                params["owners"] = int(value)
            elif token in ("-c", "--contribution"):
                params["contribution"].append(value)
            else:
                raise click.BadParameter(f"Unknown option in scenario: {token}")
        except ValueError:
            raise click.BadParameter(f"Invalid value for {token} in scenario: {value}")
        i += 1
    if params["price"] is None:
        raise click.BadParameter("Scenario missing required option price")
    return params


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two financing scenarios.

    Scenarios are provided as quoted option strings, for example:

        boat-calc compare --scenario1 "-p 800k -r 4.5 -y 5 -c A:500k -c B:300k" --scenario2 "-p 800k -r 3 -y 10 -c A:500k -c B:300k"
    """
    results = []
    for opts in (scenario1, scenario2):
        params, contributions = build_financing_from_options(**parse_scenario_opts(opts))
        results.append(summarize(run_financing(params, contributions)))
    print_comparison(results[0], results[1])


if __name__ == "__main__":
    cli()
