"""The slot walk of an eth.store day."""

from __future__ import annotations

from asyncio import Semaphore, as_completed, create_task, gather

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from src.helpers.constants import DEFAULT_CONCURRENCY
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from src.ethstore.gateway import ChainDataGateway
    from src.ethstore.models import BlockRecord
    from src.ethstore.snapshot import ValidatorSnapshotIndex


class SlotTotals(BaseModel):
    """What the blocks of a day added up to."""

    deposits_sum_gwei: int
    tx_fees_sum_wei: int
    slots: int
    missed_slots: int

    model_config = ConfigDict(frozen=True)


class DayAccumulator:
    """Folds block records into the day's deposit and fee sums.

    Fees count when the block's proposer is eligible. Deposits count when the
    depositor is eligible, whoever proposed the block that carries them.
    """

    def __init__(
        self, eligible: frozenset[int], start_snapshot: ValidatorSnapshotIndex
    ) -> None:
        self.eligible = eligible
        self.start_snapshot = start_snapshot
        self.deposits_sum_gwei = 0
        self.tx_fees_sum_wei = 0
        self.slots = 0
        self.missed_slots = 0

    def add(self, record: BlockRecord) -> None:
        self.slots += 1
        if record.proposer_index is None:
            self.missed_slots += 1
            return

        if record.proposer_index in self.eligible:
            self.tx_fees_sum_wei += record.fee_earned

        for deposit in record.deposits:
            depositor = self.start_snapshot.index_of(deposit.pubkey)
            if depositor is not None and depositor in self.eligible:
                self.deposits_sum_gwei += deposit.amount

    def totals(self) -> SlotTotals:
        return SlotTotals(
            deposits_sum_gwei=self.deposits_sum_gwei,
            tx_fees_sum_wei=self.tx_fees_sum_wei,
            slots=self.slots,
            missed_slots=self.missed_slots,
        )


class DayAggregator:
    """Fetches every block of a slot range and folds it into an accumulator.

    At most ``concurrency`` fetches are in flight. Fetch tasks only talk to the
    gateway; the records are folded one at a time by :meth:`walk` itself. If
    any fetch fails, or the walk is cancelled, every outstanding fetch is
    cancelled before the error propagates.
    """

    def __init__(
        self,
        gateway: ChainDataGateway,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        on_slot: Callable[[int], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if concurrency < 1:
            msg = "concurrency must be at least 1"
            raise ValueError(msg)
        self.gateway = gateway
        self.concurrency = concurrency
        self.on_slot = on_slot
        self.logger = logger or get_logger(__name__)

    async def walk(
        self, first_slot: int, last_slot: int, accumulator: DayAccumulator
    ) -> SlotTotals:
        """Fold the blocks of ``[first_slot, last_slot]`` into ``accumulator``."""
        semaphore = Semaphore(self.concurrency)

        async def fetch(slot: int) -> BlockRecord:
            async with semaphore:
                self.logger.debug("Fetching slot %d", slot)
                return await self.gateway.get_block(slot)

        tasks = [create_task(fetch(slot)) for slot in range(first_slot, last_slot + 1)]
        try:
            for next_record in as_completed(tasks):
                record = await next_record
                accumulator.add(record)
                if self.on_slot is not None:
                    self.on_slot(record.slot)
        except BaseException:
            for task in tasks:
                task.cancel()
            await gather(*tasks, return_exceptions=True)
            raise

        totals = accumulator.totals()
        self.logger.debug(
            "Walked slots %d-%d: %d missed", first_slot, last_slot, totals.missed_slots
        )
        return totals


__all__ = ["DayAccumulator", "DayAggregator", "SlotTotals"]
