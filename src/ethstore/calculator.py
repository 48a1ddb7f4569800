"""Calculation of eth.store days.

Example:
    ```python
    from asyncio import run

    from src.ethstore.calculator import calculate

    day = run(calculate("http://localhost:5052", 10))
    print(day.apr)
    ```
"""

from __future__ import annotations

from asyncio import Semaphore, create_task, gather
from functools import partial

from typing import TYPE_CHECKING, Any, TypeVar

from src.ethstore.aggregator import DayAccumulator, DayAggregator
from src.ethstore.eligibility import balance_sums, eligible_indices
from src.ethstore.errors import InternalError, InvalidArgument
from src.ethstore.fees import NullFeeExtractor, ReceiptsFeeExtractor
from src.ethstore.formula import compute_apr, format_apr, total_rewards_wei
from src.ethstore.gateway import BeaconGateway
from src.ethstore.models import DayResult
from src.ethstore.settings import Settings
from src.ethstore.snapshot import ValidatorSnapshotIndex
from src.ethstore.timing import ChainTimeModel
from src.helpers.constants import DEFAULT_DAYS_CONCURRENCY
from src.helpers.logging import get_call_logger


if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Coroutine, Iterable

    from src.ethstore.fees import FeeExtractor
    from src.ethstore.gateway import ChainDataGateway


T = TypeVar("T")


def parse_day(day: int | str) -> int:
    """Validate a day index given as int or decimal string.

    Raises:
        InvalidArgument: If day is not a non-negative integer
    """
    if isinstance(day, bool):
        msg = f"Invalid day: {day!r}"
        raise InvalidArgument(msg)
    if isinstance(day, str):
        if not day.strip().isdecimal():
            msg = f"Invalid day: {day!r}"
            raise InvalidArgument(msg)
        day = int(day)
    if not isinstance(day, int):
        msg = f"Invalid day: {day!r}"
        raise InvalidArgument(msg)
    if day < 0:
        msg = f"Day must not be negative, got {day}"
        raise InvalidArgument(msg)
    return day


async def gather_or_cancel(coroutines: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """Await all, in order; on the first failure cancel the rest and re-raise."""
    tasks = [create_task(coroutine) for coroutine in coroutines]
    try:
        return list(await gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await gather(*tasks, return_exceptions=True)
        raise


class DayCalculator:
    """Calculates days against one gateway.

    The calculator holds no state between days beyond the network's time
    parameters, which it fetches on first use.
    """

    def __init__(
        self,
        gateway: ChainDataGateway,
        *,
        settings: Settings | None = None,
        on_slot: Callable[[int], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the calculator.

        Args:
            gateway: Source of chain data
            settings: Concurrency, finality check and verbosity
            on_slot: Called with every slot once its block has been folded
            logger: Logger of this calculation, a fresh one at
                ``settings.log_level`` when omitted
        """
        self.gateway = gateway
        self.settings = settings or Settings()
        self.on_slot = on_slot
        self.logger = logger or get_call_logger(
            __name__, log_level=self.settings.log_level
        )
        self._time_model: ChainTimeModel | None = None

    async def time_model(self) -> ChainTimeModel:
        if self._time_model is None:
            params = await self.gateway.get_network_params()
            self._time_model = ChainTimeModel(params)
            self.logger.debug(
                "Network: genesis %d, %ds slots, %d slots per epoch, %d epochs per day",
                params.genesis_time,
                params.seconds_per_slot,
                params.slots_per_epoch,
                self._time_model.epochs_per_day,
            )
        return self._time_model

    async def latest_day(self) -> int:
        """The last day whose closing snapshot is finalized.

        Raises:
            InvalidArgument: If no day has been finalized yet
        """
        time_model = await self.time_model()
        finalized_epoch = await self.gateway.get_finalized_epoch()
        day = time_model.latest_complete_day(finalized_epoch)
        if day is None:
            msg = f"No complete day finalized yet (finalized epoch {finalized_epoch})"
            raise InvalidArgument(msg)
        return day

    async def _require_finalized(self, day: int, closing_epoch: int) -> None:
        finalized_epoch = await self.gateway.get_finalized_epoch()
        if closing_epoch > finalized_epoch:
            msg = (
                f"Day {day} is not finalized yet: needs epoch {closing_epoch}, "
                f"finalized epoch is {finalized_epoch}"
            )
            raise InvalidArgument(msg)

    async def calculate(self, day: int | str) -> DayResult:
        """Calculate one day.

        Args:
            day: Day index since genesis

        Returns:
            DayResult: The complete figures of the day

        Raises:
            InvalidArgument: If day is invalid or not finalized yet
            MalformedSnapshot: If a validator snapshot is unusable
            MalformedResponse: If any other response does not parse
            GatewayUnavailable: If the data source fails for good
            InternalError: If the accounting does not add up
        """
        day = parse_day(day)
        time_model = await self.time_model()
        start_epoch, end_epoch = time_model.day_to_epoch_range(day)
        closing_epoch = end_epoch + 1

        if self.settings.check_finality:
            await self._require_finalized(day, closing_epoch)

        self.logger.info(
            "Calculating day %d (epochs %d-%d)", day, start_epoch, end_epoch
        )

        start_validators, end_validators = await gather_or_cancel([
            self.gateway.get_validators(time_model.epoch_start_slot(start_epoch)),
            self.gateway.get_validators(time_model.epoch_start_slot(closing_epoch)),
        ])
        start_snapshot = ValidatorSnapshotIndex(start_validators)
        end_snapshot = ValidatorSnapshotIndex(end_validators)

        eligible = eligible_indices(start_snapshot, end_snapshot, start_epoch, end_epoch)
        sums = balance_sums(eligible, start_snapshot, end_snapshot)
        self.logger.debug(
            "Day %d: %d of %d validators eligible",
            day,
            len(eligible),
            len(start_snapshot),
        )

        first_slot, last_slot = time_model.day_to_slot_range(day)
        aggregator = DayAggregator(
            self.gateway,
            concurrency=self.settings.concurrency,
            on_slot=self.on_slot,
            logger=self.logger,
        )
        totals = await aggregator.walk(
            first_slot, last_slot, DayAccumulator(eligible, start_snapshot)
        )
        if totals.slots != time_model.slots_per_day:
            msg = (
                f"Day {day}: folded {totals.slots} slots, "
                f"expected {time_model.slots_per_day}"
            )
            raise InternalError(msg)

        consensus_rewards_gwei = (
            sums.end_balance - sums.start_balance - totals.deposits_sum_gwei
        )
        apr = compute_apr(
            consensus_rewards_gwei, totals.tx_fees_sum_wei, sums.effective_balance
        )
        result = DayResult(
            day=day,
            day_start=time_model.day_start_time(day),
            start_epoch=start_epoch,
            end_epoch=end_epoch,
            validator_count=len(eligible),
            effective_balance_gwei=sums.effective_balance,
            start_balance_gwei=sums.start_balance,
            end_balance_gwei=sums.end_balance,
            deposits_sum_gwei=totals.deposits_sum_gwei,
            consensus_rewards_gwei=consensus_rewards_gwei,
            tx_fees_sum_wei=totals.tx_fees_sum_wei,
            total_rewards_wei=total_rewards_wei(
                consensus_rewards_gwei, totals.tx_fees_sum_wei
            ),
            apr=apr,
        )
        self.logger.info(
            "Day %d: apr %s over %d validators",
            day,
            format_apr(apr, 6),
            result.validator_count,
        )
        return result


def build_fee_extractor(
    settings: Settings, logger: logging.Logger | None = None
) -> FeeExtractor:
    """Receipts-based fees when an execution node is configured, else none."""
    logger = logger or get_call_logger(__name__, log_level=settings.log_level)
    if settings.execution_url:
        return ReceiptsFeeExtractor(
            settings.execution_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
            retry_max_delay=settings.retry_max_delay,
            logger=logger,
        )
    logger.warning(
        "No execution node configured, transaction fees are not counted"
    )
    return NullFeeExtractor()


async def calculate(
    beacon_url: str,
    day: int | str,
    *,
    settings: Settings | None = None,
    fee_extractor: FeeExtractor | None = None,
    on_slot: Callable[[int], None] | None = None,
    **gateway_kwargs: Any,
) -> DayResult:
    """Calculate the eth.store figures of one day.

    Args:
        beacon_url: Beacon node API base URL
        day: Day index since genesis
        settings: Per-call settings, defaults when omitted
        fee_extractor: Fee source; built from ``settings.execution_url`` when
            omitted. The call takes ownership and closes it.
        on_slot: Progress callback, called with every folded slot
        **gateway_kwargs: Passed on to :class:`BeaconGateway` (e.g. ``client``)

    Returns:
        DayResult: The complete figures of the day
    """
    settings = settings or Settings()
    logger = get_call_logger(__name__, log_level=settings.log_level)
    extractor = fee_extractor or build_fee_extractor(settings, logger)
    async with BeaconGateway(
        beacon_url,
        settings=settings,
        fee_extractor=extractor,
        logger=logger,
        **gateway_kwargs,
    ) as gateway:
        calculator = DayCalculator(
            gateway, settings=settings, on_slot=on_slot, logger=logger
        )
        return await calculator.calculate(day)


async def calculate_days(
    beacon_url: str,
    days: Iterable[int | str],
    *,
    settings: Settings | None = None,
    days_concurrency: int = DEFAULT_DAYS_CONCURRENCY,
    on_slot: Callable[[int, int], None] | None = None,
    **gateway_kwargs: Any,
) -> list[DayResult]:
    """Calculate several days, at most ``days_concurrency`` at a time.

    Every day is an independent calculation with its own gateway. Results come
    back in the order the days were given.

    Args:
        beacon_url: Beacon node API base URL
        days: Day indices
        settings: Per-call settings shared by every day
        days_concurrency: Days calculated in parallel
        on_slot: Progress callback, called with ``(day, slot)``
        **gateway_kwargs: Passed on to every day's :class:`BeaconGateway`
    """
    if days_concurrency < 1:
        msg = "days_concurrency must be at least 1"
        raise InvalidArgument(msg)
    settings = settings or Settings()
    parsed_days = [parse_day(day) for day in days]
    semaphore = Semaphore(days_concurrency)

    async def one_day(day: int) -> DayResult:
        async with semaphore:
            return await calculate(
                beacon_url,
                day,
                settings=settings,
                on_slot=partial(on_slot, day) if on_slot is not None else None,
                **gateway_kwargs,
            )

    return await gather_or_cancel(one_day(day) for day in parsed_days)


async def get_latest_day(
    beacon_url: str, *, settings: Settings | None = None, **gateway_kwargs: Any
) -> int:
    """The last day that can be calculated from finalized data."""
    settings = settings or Settings()
    logger = get_call_logger(__name__, log_level=settings.log_level)
    async with BeaconGateway(
        beacon_url,
        settings=settings,
        fee_extractor=NullFeeExtractor(),
        logger=logger,
        **gateway_kwargs,
    ) as gateway:
        return await DayCalculator(
            gateway, settings=settings, logger=logger
        ).latest_day()


__all__ = [
    "DayCalculator",
    "build_fee_extractor",
    "calculate",
    "calculate_days",
    "gather_or_cancel",
    "get_latest_day",
    "parse_day",
]
