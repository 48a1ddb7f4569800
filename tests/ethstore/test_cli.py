"""Tests for the command-line entry point."""

import json
from datetime import UTC, datetime
from fractions import Fraction
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from src.ethstore.cli import (
    build_parser,
    main,
    parse_days,
    results_json,
    results_table,
    settings_from_args,
)
from src.ethstore.errors import GatewayUnavailable, InvalidArgument
from src.ethstore.models import DayResult


def day_result(day: int) -> DayResult:
    return DayResult(
        day=day,
        day_start=datetime(2020, 12, 1, 12, 0, 23, tzinfo=UTC),
        start_epoch=day * 225,
        end_epoch=day * 225 + 224,
        validator_count=29,
        effective_balance_gwei=928_000_000_000,
        start_balance_gwei=928_000_000_000,
        end_balance_gwei=960_092_800_000,
        deposits_sum_gwei=32_000_000_000,
        consensus_rewards_gwei=92_800_000,
        tx_fees_sum_wei=65_250_000_000_000_000,
        total_rewards_wei=158_050_000_000_000_000,
        apr=Fraction(621640625, 10**10),
    )


@pytest.fixture
def fake_backend(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Replace the network calls of the CLI with canned results."""
    calls: dict[str, Any] = {}

    async def fake_calculate_days(beacon_url: str, days: list[int], **kwargs: Any) -> list:
        calls["beacon_url"] = beacon_url
        calls["days"] = days
        calls.update(kwargs)
        for day in days:
            kwargs["on_slot"](day, day * 7200)
        return [day_result(day) for day in days]

    async def fake_get_latest_day(beacon_url: str, **kwargs: Any) -> int:
        calls["latest_from"] = beacon_url
        return 12

    monkeypatch.setattr("src.ethstore.cli.calculate_days", fake_calculate_days)
    monkeypatch.setattr("src.ethstore.cli.get_latest_day", fake_get_latest_day)
    monkeypatch.delenv("BEACON_ENDPOINT", raising=False)
    monkeypatch.delenv("ETH_RPC_URL", raising=False)
    return calls


class TestParseDays:
    """Tests for parse_days."""

    @pytest.mark.parametrize(
        ("spec", "expected"),
        [
            ("10", [10]),
            ("10-12", [10, 11, 12]),
            ("1,4-6", [1, 4, 5, 6]),
            ("5, 3 ,5", [3, 5]),
            ("7-7", [7]),
        ],
    )
    def test_valid_lists(self, spec: str, expected: list[int]) -> None:
        """Test single days, ranges and lists."""
        assert parse_days(spec) == expected

    @pytest.mark.parametrize("spec", ["", "1,,2", "12-10", "a-b", "-3", "1-"])
    def test_invalid_lists(self, spec: str) -> None:
        """Test malformed lists raise InvalidArgument."""
        with pytest.raises(InvalidArgument):
            parse_days(spec)


class TestSettingsFromArgs:
    """Tests for settings_from_args."""

    def test_flags_override_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test command-line values win over ETHSTORE_* variables."""
        monkeypatch.setenv("ETHSTORE_CONCURRENCY", "8")
        monkeypatch.setenv("ETHSTORE_MAX_RETRIES", "4")
        args = build_parser().parse_args(
            ["--concurrency", "2", "--debug", "--no-finality-check", "--timeout", "5"]
        )

        settings = settings_from_args(args)

        assert settings.concurrency == 2
        assert settings.max_retries == 4
        assert settings.request_timeout == 5.0
        assert settings.log_level == "DEBUG"
        assert settings.check_finality is False

    def test_execution_url_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test --execution-url enables receipts-based fees."""
        monkeypatch.delenv("ETH_RPC_URL", raising=False)
        args = build_parser().parse_args(["--execution-url", "http://geth:8545"])

        assert settings_from_args(args).execution_url == "http://geth:8545"


class TestOutput:
    """Tests for result rendering."""

    def test_results_json(self) -> None:
        """Test JSON output is a list of day objects with string APRs."""
        payload = json.loads(results_json([day_result(10), day_result(11)]))

        assert [entry["day"] for entry in payload] == [10, 11]
        assert payload[0]["apr"] == "0.062164062500000000"
        assert payload[0]["day_start"] == "2020-12-01T12:00:23Z"

    def test_results_table(self) -> None:
        """Test the table lists one row per day."""
        console = Console(record=True, width=160)
        console.print(results_table([day_result(10)]))
        text = console.export_text()

        assert "0.062164" in text
        assert "29" in text


class TestMain:
    """Tests for main."""

    def test_latest_day_as_json(
        self, fake_backend: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test the default run resolves the latest day and prints JSON."""
        exit_code = main(["--json", "--beacon-url", "http://node:5052/"])

        assert exit_code == 0
        assert fake_backend["latest_from"] == "http://node:5052"
        assert fake_backend["days"] == [12]
        payload = json.loads(capsys.readouterr().out)
        assert payload[0]["day"] == 12

    def test_day_range(
        self, fake_backend: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test --days and --days-concurrency are passed on."""
        exit_code = main(["--days", "10-11", "--days-concurrency", "2", "--json"])

        assert exit_code == 0
        assert fake_backend["days"] == [10, 11]
        assert fake_backend["days_concurrency"] == 2
        assert fake_backend["beacon_url"] == "http://localhost:5052"

    def test_table_output(
        self, fake_backend: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a table is printed without --json."""
        assert main(["--days", "10"]) == 0

        assert "eth.store" in capsys.readouterr().out

    def test_json_file(self, fake_backend: dict[str, Any], tmp_path: Path) -> None:
        """Test results can be written to a file."""
        target = tmp_path / "days.json"

        assert main(["--days", "10", "--json-file", str(target)]) == 0

        assert json.loads(target.read_text())[0]["apr"] == "0.062164062500000000"

    def test_errors_exit_with_one(
        self,
        fake_backend: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test calculation errors give exit code 1 and a message."""

        async def failing(*args: Any, **kwargs: Any) -> list:
            msg = "GET /eth/v2/beacon/blocks/72003 failed"
            raise GatewayUnavailable(msg)

        monkeypatch.setattr("src.ethstore.cli.calculate_days", failing)

        assert main(["--days", "10"]) == 1
        assert "blocks/72003" in capsys.readouterr().err

    def test_invalid_day_list(
        self, fake_backend: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a malformed --days value gives exit code 1."""
        assert main(["--days", "12-10"]) == 1
        assert "Descending day range" in capsys.readouterr().err
