"""Which validators count towards a day, and what they hold."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from src.ethstore.errors import InternalError


if TYPE_CHECKING:
    from src.ethstore.models import ValidatorSnapshot
    from src.ethstore.snapshot import ValidatorSnapshotIndex


class BalanceSums(BaseModel):
    """Balances of the eligible set, in Gwei."""

    start_balance: int
    end_balance: int
    effective_balance: int

    model_config = ConfigDict(frozen=True)


def is_eligible(
    start: ValidatorSnapshot,
    end: ValidatorSnapshot,
    start_epoch: int,
    end_epoch: int,
) -> bool:
    """Active for the whole day and never slashed, judged from both snapshots.

    The latest activation and the earliest exit seen in either snapshot are
    used, so a status change recorded in only one of them still counts.
    """
    activation_epoch = max(start.activation_epoch, end.activation_epoch)
    exit_epoch = min(start.exit_epoch, end.exit_epoch)
    return (
        activation_epoch <= start_epoch
        and exit_epoch > end_epoch
        and not (start.is_slashed or end.is_slashed)
    )


def eligible_indices(
    start: ValidatorSnapshotIndex,
    end: ValidatorSnapshotIndex,
    start_epoch: int,
    end_epoch: int,
) -> frozenset[int]:
    """Indices present in both snapshots that pass :func:`is_eligible`."""
    eligible: set[int] = set()
    for start_validator in start:
        end_validator = end.get(start_validator.index)
        if end_validator is None:
            continue
        if is_eligible(start_validator, end_validator, start_epoch, end_epoch):
            eligible.add(start_validator.index)
    return frozenset(eligible)


def balance_sums(
    eligible: frozenset[int],
    start: ValidatorSnapshotIndex,
    end: ValidatorSnapshotIndex,
) -> BalanceSums:
    """Sum start, end and effective balances over the eligible set.

    The effective balance is taken at the start of the day.

    Raises:
        InternalError: If an eligible index is missing from a snapshot
    """
    start_balance = end_balance = effective_balance = 0
    for index in sorted(eligible):
        start_validator = start.get(index)
        end_validator = end.get(index)
        if start_validator is None or end_validator is None:
            msg = f"Eligible validator {index} is missing from a snapshot"
            raise InternalError(msg)
        start_balance += start_validator.balance
        end_balance += end_validator.balance
        effective_balance += start_validator.effective_balance

    return BalanceSums(
        start_balance=start_balance,
        end_balance=end_balance,
        effective_balance=effective_balance,
    )


__all__ = ["BalanceSums", "balance_sums", "eligible_indices", "is_eligible"]
