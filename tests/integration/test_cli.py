"""
Integration tests for the command-line interface.

Each invocation is a separate process-like run against the same JSON file,
so these also cover persistence between transactions.
"""

import json

import pytest
from click.testing import CliRunner

from policy_ledger.cli import main


T0 = "2024-01-01T09:00:00Z"


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Invoke the CLI against a store file in a temporary directory."""
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    store_path = tmp_path / "ledger.json"

    def invoke(*args: str, at: str = T0):
        return runner.invoke(main, ["--store", str(store_path), "--at", at, *args])

    return invoke


@pytest.fixture
def initialized(cli):
    result = cli("init")
    assert result.exit_code == 0, result.output
    return cli


class TestLedgerCommands:
    """Tests for ledger-level commands."""

    def test_init(self, cli):
        result = cli("init")

        assert result.exit_code == 0
        assert "Ledger initialized successfully" in result.output

    def test_create_before_init_fails(self, cli):
        result = cli("create", "--holder", "Jane", "--age", "40", "--premium", "100", "--installments", "2")

        assert result.exit_code == 1
        assert "NotInitializedError" in result.output

    def test_empty_list(self, initialized):
        result = initialized("list")

        assert result.exit_code == 0
        assert json.loads(result.output) == []

    def test_invalid_timestamp(self, cli):
        result = cli("init", at="yesterday-ish")

        assert result.exit_code == 2

    def test_maturity(self, initialized):
        result = initialized("maturity", "--premium", "10000", "--installments", "1", "--profit-rate", "13")

        assert result.exit_code == 0
        assert result.output.strip() == "11300.00"

    def test_profit_rate_round_trip(self, initialized):
        assert initialized("profit-rate").output.strip() == "13"

        assert initialized("set-profit-rate", "10").exit_code == 0
        assert initialized("profit-rate").output.strip() == "10"

        rejected = initialized("set-profit-rate", "0")
        assert rejected.exit_code == 1
        assert "InvalidProfitRateError" in rejected.output

    def test_validate_config(self, cli):
        result = cli("validate-config")

        assert result.exit_code == 0
        assert "Configuration is valid." in result.output


class TestPolicyCommands:
    """Tests for the policy lifecycle through the CLI."""

    def test_create_pay_claim(self, initialized):
        created = initialized(
            "create", "--holder", "Jane Doe", "--age", "40", "--premium", "100", "--installments", "2"
        )
        assert created.exit_code == 0
        assert "Created policy 1" in created.output

        assert initialized("pay", "1", "100", at="2024-01-01T09:00:01Z").exit_code == 0

        too_soon = initialized("pay", "1", "100", at="2024-01-01T09:00:05Z")
        assert too_soon.exit_code == 1
        assert "TooSoonError" in too_soon.output

        paid = initialized("pay", "1", "100", at="2024-01-01T09:00:30Z")
        assert paid.exit_code == 0
        assert "2/2 installments" in paid.output

        claimed = initialized("claim", "1", at="2024-01-01T09:01:00Z")
        assert claimed.exit_code == 0
        assert "user balance 240.69" in claimed.output

        shown = json.loads(initialized("show", "1", at="2024-01-01T09:01:00Z").output)
        assert shown["status"] == "Claimed"
        assert shown["holderName"] == "Jane Doe"
        assert shown["paymentCount"] == 2

    def test_create_life_package(self, initialized):
        result = initialized("create", "--type", "life", "--holder", "Rahim", "--age", "35", "--package", "Gold")
        assert result.exit_code == 0

        shown = json.loads(initialized("show", "1").output)
        assert shown["policyType"] == "Life"
        assert shown["installmentNo"] == 20
        assert initialized("installments", "1").output.strip() == "20"

    def test_unknown_package(self, initialized):
        result = initialized("create", "--holder", "Rahim", "--age", "35", "--package", "Diamond")

        assert result.exit_code == 1
        assert "UnknownPackageError" in result.output

    def test_cancel_and_total_paid(self, initialized):
        initialized("create", "--holder", "Jane", "--age", "40", "--premium", "100", "--installments", "3")
        initialized("pay", "1", "100", at="2024-01-01T09:00:01Z")

        assert initialized("total-paid", "1").output.strip() == "100"

        cancelled = initialized("cancel", "1", at="2024-01-01T09:00:02Z")
        assert cancelled.exit_code == 0
        assert "user balance 100" in cancelled.output

    def test_update_and_set_installments(self, initialized):
        initialized("create", "--holder", "Jane", "--age", "40", "--premium", "100", "--installments", "3")

        updated = initialized(
            "update", "1",
            "--holder", "Janet", "--type", "Life", "--premium", "50",
            "--coverage", "1000", "--installments", "4", "--total-premium", "200",
        )
        assert updated.exit_code == 0

        assert initialized("set-installments", "1", "6").exit_code == 0
        assert initialized("set-installments", "1", "0").exit_code == 1

        shown = json.loads(initialized("show", "1").output)
        assert shown["holderName"] == "Janet"
        assert shown["installmentNo"] == 6
        assert shown["totalPremiumToPay"] == "200"

    def test_delete_and_count(self, initialized):
        for _ in range(3):
            initialized("create", "--holder", "Jane", "--age", "40", "--premium", "100", "--installments", "2")

        assert initialized("delete", "2", "--yes").exit_code == 0

        listed = json.loads(initialized("list").output)
        assert [p["id"] for p in listed] == [1, 3]
        assert initialized("count").output.strip() == "3"

    def test_expire(self, initialized):
        initialized("create", "--holder", "Jane", "--age", "40", "--premium", "100", "--installments", "2")

        result = initialized("expire", at="2024-01-01T09:10:00Z")

        assert result.exit_code == 0
        assert "Expired 1 policies: 1" in result.output

    def test_show_missing(self, initialized):
        result = initialized("show", "42")

        assert result.exit_code == 1
        assert "PolicyNotFoundError" in result.output
