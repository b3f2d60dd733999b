import csv
import json

import pytest
from click.testing import CliRunner

from boat_calc.main import cli, parse_scenario_opts


@pytest.fixture
def runner():
    return CliRunner()


class TestFinancingCommand:

    def test_prints_summary_and_breakdown(self, runner):
        result = runner.invoke(
            cli, ["financing", "-p", "800k", "-r", "0", "-y", "1", "-c", "Anna:500k", "-c", "Bjorn:300k"]
        )
        assert result.exit_code == 0, result.output
        assert "Monthly (internal) : 8 333 kr" in result.output
        assert "Anna" in result.output
        assert "receives" in result.output
        assert "pays" in result.output

    def test_owners_pads_with_zero_contributions(self, runner, tmp_path):
        out = tmp_path / "result.json"
        result = runner.invoke(
            cli, ["financing", "-p", "400000", "-n", "4", "-c", "400000", "--output", str(out)]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        names = [row["name"] for row in data["breakdown"]]
        assert names == ["Person 1", "Person 2", "Person 3", "Person 4"]
        assert data["summary"]["internal_loan_amount"] == 300000.0

    def test_json_export(self, runner, tmp_path):
        out = tmp_path / "result.json"
        result = runner.invoke(
            cli,
            ["financing", "-p", "800000", "-r", "0", "-y", "1", "-c", "500000", "-c", "300000", "--output", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "Financing exported to" in result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["summary"]["monthly_payment"] == pytest.approx(8333.33, abs=0.01)
        assert data["breakdown"][0]["net_monthly_payment"] == pytest.approx(-8333.33, abs=0.01)

    def test_csv_export(self, runner, tmp_path):
        out = tmp_path / "result.csv"
        result = runner.invoke(
            cli, ["financing", "-p", "800000", "-c", "A:500000", "-c", "B:300000", "--output", str(out)]
        )
        assert result.exit_code == 0, result.output
        with out.open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "Id"
        assert [r[1] for r in rows[1:]] == ["A", "B"]
        assert rows[1][8] == "60"

    def test_unsupported_output(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["financing", "-p", "800000", "-c", "1", "--output", str(tmp_path / "x.txt")]
        )
        assert result.exit_code == 2
        assert "Unsupported output format" in result.output

    def test_no_contributions_is_usage_error(self, runner):
        result = runner.invoke(cli, ["financing", "-p", "800000"])
        assert result.exit_code == 2
        assert "At least one contribution is required" in result.output

    def test_zero_term_is_usage_error(self, runner):
        result = runner.invoke(cli, ["financing", "-p", "800000", "-y", "0", "-c", "1"])
        assert result.exit_code == 2
        assert "Loan term must be a positive" in result.output

    def test_absurd_term_is_usage_error(self, runner):
        result = runner.invoke(
            cli, ["financing", "-p", "800000", "-y", "100000000", "-c", "Anna:500000", "-c", "Bjorn:300000"]
        )
        assert result.exit_code == 2
        assert "Cannot amortize over" in result.output

    def test_bad_contribution(self, runner):
        result = runner.invoke(cli, ["financing", "-p", "800000", "-c", "Anna:lots"])
        assert result.exit_code == 2
        assert "NAME:AMOUNT" in result.output


class TestBudgetCommand:

    def test_default_motorboat(self, runner):
        result = runner.invoke(cli, ["budget", "-b", "50k"])
        assert result.exit_code == 0, result.output
        assert "714 285 kr" in result.output
        assert "1 041 kr" in result.output
        assert "finn.no" in result.output

    def test_invalid_boat_type(self, runner):
        result = runner.invoke(cli, ["budget", "-b", "50k", "--boat-type", "canoe"])
        assert result.exit_code == 2

    def test_zero_owners(self, runner):
        result = runner.invoke(cli, ["budget", "-b", "50k", "-n", "0"])
        assert result.exit_code == 2
        assert "at least 1" in result.output


class TestCompareCommand:

    def test_side_by_side(self, runner):
        result = runner.invoke(
            cli,
            [
                "compare",
                "--scenario1",
                "-p 800k -r 4.5 -y 5 -c A:500k -c B:300k",
                "--scenario2",
                "-p 800k -r 3 -y 10 -c A:500k -c B:300k",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Comparison" in result.output
        assert "num_payments" in result.output

    def test_scenario_parsing(self):
        params = parse_scenario_opts("--price 1m -n 3 -c 'Kari Nordmann:200k'")
        assert params == {
            "price": "1m",
            "rate": 4.5,
            "years": 5,
            "owners": 3,
            "contribution": ["Kari Nordmann:200k"],
        }

    @pytest.mark.parametrize("opts", ["-r 3", "-p 800k --bogus 1", "-p 800k -y", "-p 800k -y five"])
    def test_invalid_scenarios(self, runner, opts):
        result = runner.invoke(cli, ["compare", "--scenario1", opts, "--scenario2", "-p 1 -c 1"])
        assert result.exit_code == 2
