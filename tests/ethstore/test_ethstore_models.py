"""Tests for the eth.store record models."""

import json
from datetime import UTC, datetime
from fractions import Fraction

import pytest

from pydantic import ValidationError

from src.ethstore.models import (
    BlockRecord,
    DayResult,
    Deposit,
    NetworkTimeParams,
    ValidatorStatus,
)


def day_result(**overrides: object) -> DayResult:
    values: dict[str, object] = {
        "day": 10,
        "day_start": datetime(2020, 12, 11, 12, 0, 23, tzinfo=UTC),
        "start_epoch": 2250,
        "end_epoch": 2474,
        "validator_count": 29,
        "effective_balance_gwei": 928_000_000_000,
        "start_balance_gwei": 928_000_000_000,
        "end_balance_gwei": 960_092_800_000,
        "deposits_sum_gwei": 32_000_000_000,
        "consensus_rewards_gwei": 92_800_000,
        "tx_fees_sum_wei": 65_250_000_000_000_000,
        "total_rewards_wei": 158_050_000_000_000_000,
        "apr": Fraction(621640625, 10**10),
    }
    values.update(overrides)
    return DayResult.model_validate(values)


class TestDayResult:
    """Tests for DayResult."""

    def test_apr_serializes_as_decimal_string(self) -> None:
        """Test JSON output carries the APR as an 18 place string."""
        payload = json.loads(day_result().model_dump_json())

        assert payload["apr"] == "0.062164062500000000"
        assert payload["day"] == 10
        assert payload["tx_fees_sum_wei"] == 65_250_000_000_000_000

    def test_apr_stays_exact_in_memory(self) -> None:
        """Test the APR attribute is the exact fraction."""
        assert day_result().apr == Fraction(621640625, 10**10)

    def test_negative_rewards_allowed(self) -> None:
        """Test penalty days validate."""
        result = day_result(consensus_rewards_gwei=-5, total_rewards_wei=-5_000_000_000)
        assert result.consensus_rewards_gwei == -5

    def test_negative_balance_rejected(self) -> None:
        """Test balances cannot be negative."""
        with pytest.raises(ValidationError):
            day_result(start_balance_gwei=-1)

    def test_is_frozen(self) -> None:
        """Test results cannot be modified."""
        result = day_result()
        with pytest.raises(ValidationError):
            result.day = 11  # type: ignore[misc]


class TestBlockRecord:
    """Tests for BlockRecord."""

    def test_missed_slot(self) -> None:
        """Test a missed slot has no proposer, deposits or fee."""
        record = BlockRecord.missed(72000)

        assert record.slot == 72000
        assert record.proposer_index is None
        assert record.deposits == ()
        assert record.fee_earned == 0


class TestDeposit:
    """Tests for Deposit."""

    def test_accepts_full_length_key(self) -> None:
        """Test a 48-byte hex key is accepted as given."""
        key = "0x" + "a1" * 48

        assert Deposit(pubkey=key, amount=32_000_000_000).pubkey == key

    def test_rejects_truncated_key(self) -> None:
        """Test a short key cannot silently miss every validator."""
        with pytest.raises(ValidationError, match="pubkey"):
            Deposit(pubkey="0x" + "a1" * 47, amount=32_000_000_000)


class TestNetworkTimeParams:
    """Tests for NetworkTimeParams."""

    def test_rejects_zero_slot_length(self) -> None:
        """Test zero-length slots are invalid."""
        with pytest.raises(ValidationError):
            NetworkTimeParams(genesis_time=0, seconds_per_slot=0, slots_per_epoch=32)


class TestValidatorStatus:
    """Tests for ValidatorStatus."""

    @pytest.mark.parametrize("status", list(ValidatorStatus))
    def test_only_slashed_statuses_are_slashed(self, status: ValidatorStatus) -> None:
        """Test is_slashed matches the two slashed statuses."""
        assert status.is_slashed == status.value.endswith("_slashed")
