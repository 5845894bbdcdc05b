"""
Unit tests for CLI module.

Tests command-line interface functionality using Click's testing utilities.
"""

import json

import pytest
from click.testing import CliRunner

from cashproj import __version__
from cashproj.cli import main


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def runner(monkeypatch):
    """Create CLI test runner with a clean CASHPROJ_* environment."""
    for var in ["CASHPROJ_DEBUG", "CASHPROJ_LOG_LEVEL", "CASHPROJ_DEFAULT_HORIZON_MONTHS",
                "CASHPROJ_DEFAULT_AGE"]:
        monkeypatch.delenv(var, raising=False)
    return CliRunner()


@pytest.fixture
def invalid_file(tmp_path):
    """Instruments file with an unknown frequency."""
    path = tmp_path / "invalid.json"
    with open(path, "w") as f:
        json.dump({
            "schema_version": "0.1.0",
            "incomes": [{"amount": "1", "frequency": "weekly", "start_date": "2025-01-01"}],
        }, f)
    return path


# ============================================================================
# MAIN GROUP
# ============================================================================

class TestMainGroup:
    """Tests for the top-level command group."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "project" in result.output
        assert "contribution" in result.output
        assert "config" in result.output


# ============================================================================
# PROJECT COMMAND
# ============================================================================

class TestProjectCommand:
    """Tests for `cashproj project`."""

    def test_quiet_summary(self, runner, portfolio_file):
        result = runner.invoke(main, [
            "-q", "project", "-c", str(portfolio_file), "-m", "6", "-b", "1000",
            "--start", "2025-01",
        ])
        assert result.exit_code == 0, result.output
        # 1000 + 6 x 1500 - 1800 laptop in March
        assert "Ending balance: 8,200.00" in result.output
        assert "Months with a deficit: 1" in result.output

    def test_table_output(self, runner, portfolio_file):
        result = runner.invoke(main, [
            "project", "-c", str(portfolio_file), "-m", "3", "--start", "2025-01",
        ])
        assert result.exit_code == 0, result.output
        assert "Jan 2025" in result.output
        assert "Ending balance" in result.output

    def test_output_file(self, runner, portfolio_file, tmp_path):
        out = tmp_path / "results" / "projection.json"
        result = runner.invoke(main, [
            "-q", "project", "-c", str(portfolio_file), "-m", "12", "--start", "2025-01",
            "-o", str(out),
        ])
        assert result.exit_code == 0, result.output

        with open(out) as f:
            data = json.load(f)
        assert data["horizon_months"] == 12
        assert data["points"][2]["special_items"][0]["name"] == "Laptop"

    def test_default_horizon_from_settings(self, runner, portfolio_file, tmp_path, monkeypatch):
        monkeypatch.setenv("CASHPROJ_DEFAULT_HORIZON_MONTHS", "5")
        out = tmp_path / "projection.json"
        result = runner.invoke(main, [
            "-q", "project", "-c", str(portfolio_file), "--start", "2025-01", "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        with open(out) as f:
            assert json.load(f)["horizon_months"] == 5

    def test_negative_horizon_fails(self, runner, portfolio_file):
        result = runner.invoke(main, ["project", "-c", str(portfolio_file), "-m", "-1"])
        assert result.exit_code == 1
        assert "non-negative" in result.output

    def test_bad_start_fails(self, runner, portfolio_file):
        result = runner.invoke(main, ["project", "-c", str(portfolio_file), "--start", "soon"])
        assert result.exit_code == 1

    def test_bad_balance_fails(self, runner, portfolio_file):
        result = runner.invoke(main, ["project", "-c", str(portfolio_file), "-b", "lots"])
        assert result.exit_code == 1

    def test_invalid_file_fails(self, runner, invalid_file):
        result = runner.invoke(main, ["project", "-c", str(invalid_file)])
        assert result.exit_code == 1
        assert "Error running projection" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["project", "-c", str(tmp_path / "nope.json")])
        assert result.exit_code != 0


# ============================================================================
# CONTRIBUTION COMMAND
# ============================================================================

class TestContributionCommand:
    """Tests for `cashproj contribution`."""

    def test_quiet(self, runner):
        result = runner.invoke(main, ["-q", "contribution", "10000"])
        assert result.exit_code == 0, result.output
        assert "Net take-home: 8,400.00" in result.output

    def test_json(self, runner):
        result = runner.invoke(main, ["contribution", "5000", "--age", "58", "--json"])
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["age"] == 58
        assert data["contribution"]["employee_amount"] == "850.00"
        assert set(data["sub_accounts"]) == {"oa", "sa", "ma"}
        assert "bonus" not in data

    def test_json_with_bonus(self, runner):
        result = runner.invoke(main, ["contribution", "8000", "--bonus", "16000", "--json"])
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["bonus"]["applicable_amount"] == "6000"

    def test_table(self, runner):
        result = runner.invoke(main, ["contribution", "6000", "--bonus", "6000"])
        assert result.exit_code == 0, result.output
        assert "Net take-home" in result.output

    def test_default_age_from_settings(self, runner, monkeypatch):
        monkeypatch.setenv("CASHPROJ_DEFAULT_AGE", "62")
        result = runner.invoke(main, ["contribution", "5000", "--json"])
        assert json.loads(result.output)["age"] == 62

    @pytest.mark.parametrize("gross", ["-100", "abc"])
    def test_invalid_gross(self, runner, gross):
        result = runner.invoke(main, ["contribution", "--", gross])
        assert result.exit_code == 1
        assert "Error computing contribution" in result.output


# ============================================================================
# CONFIG COMMANDS
# ============================================================================

class TestConfigCommands:
    """Tests for `cashproj config`."""

    def test_validate_valid(self, runner, portfolio_file):
        result = runner.invoke(main, ["config", "validate", str(portfolio_file)])
        assert result.exit_code == 0, result.output
        assert "Configuration is valid" in result.output

    def test_validate_quiet(self, runner, portfolio_file):
        result = runner.invoke(main, ["-q", "config", "validate", str(portfolio_file)])
        assert result.exit_code == 0
        assert result.output.strip() == "Configuration is valid"

    def test_validate_invalid(self, runner, invalid_file):
        result = runner.invoke(main, ["config", "validate", str(invalid_file)])
        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output

    def test_validate_not_json(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = runner.invoke(main, ["config", "validate", str(path)])
        assert result.exit_code == 1

    def test_invalid_settings(self, runner, portfolio_file, monkeypatch):
        monkeypatch.setenv("CASHPROJ_LOG_LEVEL", "LOUD")
        result = runner.invoke(main, ["config", "validate", str(portfolio_file)])
        assert result.exit_code == 1
