"""The eth.store APR formula, in exact rational arithmetic."""

from decimal import Decimal
from fractions import Fraction

from src.helpers.constants import APR_DECIMAL_PLACES, DAYS_PER_YEAR, GWEI_IN_WEI


def total_rewards_wei(consensus_rewards_gwei: int, tx_fees_sum_wei: int) -> int:
    """Consensus rewards converted to Wei plus execution fees."""
    return consensus_rewards_gwei * GWEI_IN_WEI + tx_fees_sum_wei


def compute_apr(
    consensus_rewards_gwei: int,
    tx_fees_sum_wei: int,
    effective_balance_gwei: int,
) -> Fraction:
    """Annualize one day of rewards against the effective balance.

    ``365 * (consensus_rewards + tx_fees) / effective_balance``, all in Wei.
    A day without eligible validators has no effective balance and an APR of
    zero.

    Args:
        consensus_rewards_gwei: Balance growth of the eligible set, deposits
            removed
        tx_fees_sum_wei: Fees earned by blocks the eligible set proposed
        effective_balance_gwei: Summed effective balance at the day's start

    Returns:
        Fraction: The exact APR
    """
    if effective_balance_gwei == 0:
        return Fraction(0)
    rewards = total_rewards_wei(consensus_rewards_gwei, tx_fees_sum_wei)
    return Fraction(
        DAYS_PER_YEAR * rewards, effective_balance_gwei * GWEI_IN_WEI
    )


def format_apr(apr: Fraction, places: int = APR_DECIMAL_PLACES) -> str:
    """Render an APR as a fixed-point decimal string, rounding half to even.

    Example:
        >>> format_apr(Fraction(4973125, 80000000), 10)
        '0.0621640625'
    """
    # round() on a Fraction is exact and rounds half to even
    scaled = round(apr * 10**places)
    return format(Decimal(scaled).scaleb(-places), "f")


__all__ = ["compute_apr", "format_apr", "total_rewards_wei"]
