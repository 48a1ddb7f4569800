"""Pydantic models for the records an eth.store day is built from."""

from __future__ import annotations

# Pydantic needs these at runtime to validate the fields
from datetime import datetime
from enum import StrEnum
from fractions import Fraction
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_serializer

from src.ethstore.formula import format_apr


BLSPubkey = Annotated[str, Field(pattern=r"^0x[0-9a-fA-F]{96}$")]
"""48-byte BLS public key as 0x-prefixed hex"""


class ValidatorStatus(StrEnum):
    """Validator status as reported by the Beacon API."""

    PENDING_INITIALIZED = "pending_initialized"
    PENDING_QUEUED = "pending_queued"
    ACTIVE_ONGOING = "active_ongoing"
    ACTIVE_EXITING = "active_exiting"
    ACTIVE_SLASHED = "active_slashed"
    EXITED_UNSLASHED = "exited_unslashed"
    EXITED_SLASHED = "exited_slashed"
    WITHDRAWAL_POSSIBLE = "withdrawal_possible"
    WITHDRAWAL_DONE = "withdrawal_done"

    @property
    def is_slashed(self) -> bool:
        return self in {ValidatorStatus.ACTIVE_SLASHED, ValidatorStatus.EXITED_SLASHED}


class NetworkTimeParams(BaseModel):
    """Genesis time and slot timing of a network."""

    genesis_time: NonNegativeInt = Field(..., description="Unix seconds")
    seconds_per_slot: int = Field(..., gt=0)
    slots_per_epoch: int = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)


class ValidatorSnapshot(BaseModel):
    """One validator as seen in the state at an epoch boundary."""

    index: NonNegativeInt
    pubkey: BLSPubkey
    balance: NonNegativeInt = Field(..., description="Gwei")
    effective_balance: NonNegativeInt = Field(..., description="Gwei")
    status: ValidatorStatus
    slashed: bool = False
    activation_epoch: NonNegativeInt
    exit_epoch: NonNegativeInt

    model_config = ConfigDict(frozen=True)

    @property
    def is_slashed(self) -> bool:
        """Slashed by flag or by status."""
        return self.slashed or self.status.is_slashed


class Deposit(BaseModel):
    """A deposit included in a beacon block."""

    pubkey: BLSPubkey
    amount: NonNegativeInt = Field(..., description="Gwei")

    model_config = ConfigDict(frozen=True)


class BlockRecord(BaseModel):
    """What a single slot contributes to the day."""

    slot: NonNegativeInt
    proposer_index: NonNegativeInt | None = Field(
        default=None, description="None for a missed slot"
    )
    deposits: tuple[Deposit, ...] = ()
    fee_earned: NonNegativeInt = Field(default=0, description="Wei")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def missed(cls, slot: int) -> BlockRecord:
        """Record for a slot without a block."""
        return cls(slot=slot)


class DayResult(BaseModel):
    """The eth.store figures of one day.

    Balances and deposits are in Gwei, fees and total rewards in Wei. ``apr`` is
    an exact fraction and serializes as a fixed-point decimal string.
    """

    day: NonNegativeInt
    day_start: datetime
    start_epoch: NonNegativeInt
    end_epoch: NonNegativeInt
    validator_count: NonNegativeInt
    effective_balance_gwei: NonNegativeInt
    start_balance_gwei: NonNegativeInt
    end_balance_gwei: NonNegativeInt
    deposits_sum_gwei: NonNegativeInt
    consensus_rewards_gwei: int
    tx_fees_sum_wei: NonNegativeInt
    total_rewards_wei: int
    apr: Fraction

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_serializer("apr")
    def _serialize_apr(self, apr: Fraction) -> str:
        return format_apr(apr)


__all__ = [
    "BLSPubkey",
    "BlockRecord",
    "DayResult",
    "Deposit",
    "NetworkTimeParams",
    "ValidatorSnapshot",
    "ValidatorStatus",
]
