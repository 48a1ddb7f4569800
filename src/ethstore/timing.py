"""Day, epoch and slot arithmetic for a network."""

from datetime import datetime

from src.ethstore.errors import InvalidArgument, MalformedResponse
from src.ethstore.models import NetworkTimeParams
from src.helpers.constants import SECONDS_PER_DAY
from src.helpers.parsers import parse_unix_timestamp


class ChainTimeModel:
    """Maps eth.store day indices onto epochs and slots.

    Day ``n`` covers the ``epochs_per_day`` epochs starting at
    ``n * epochs_per_day``, counted from genesis.
    """

    def __init__(self, params: NetworkTimeParams) -> None:
        seconds_per_epoch = params.seconds_per_slot * params.slots_per_epoch
        if SECONDS_PER_DAY % seconds_per_epoch:
            msg = (
                f"Epoch length of {seconds_per_epoch}s does not divide a day "
                f"of {SECONDS_PER_DAY}s"
            )
            raise MalformedResponse(msg)

        self.params = params
        self.seconds_per_epoch = seconds_per_epoch
        self.epochs_per_day = SECONDS_PER_DAY // seconds_per_epoch

    @property
    def slots_per_epoch(self) -> int:
        return self.params.slots_per_epoch

    @property
    def slots_per_day(self) -> int:
        return self.epochs_per_day * self.params.slots_per_epoch

    def day_to_epoch_range(self, day: int) -> tuple[int, int]:
        """First and last epoch of a day, both inclusive.

        Raises:
            InvalidArgument: If day is negative
        """
        if day < 0:
            msg = f"Day must not be negative, got {day}"
            raise InvalidArgument(msg)
        start_epoch = day * self.epochs_per_day
        return start_epoch, start_epoch + self.epochs_per_day - 1

    def epoch_start_slot(self, epoch: int) -> int:
        if epoch < 0:
            msg = f"Epoch must not be negative, got {epoch}"
            raise InvalidArgument(msg)
        return epoch * self.params.slots_per_epoch

    def epoch_to_slot_range(self, epoch: int) -> tuple[int, int]:
        """First and last slot of an epoch, both inclusive."""
        first_slot = self.epoch_start_slot(epoch)
        return first_slot, first_slot + self.params.slots_per_epoch - 1

    def day_to_slot_range(self, day: int) -> tuple[int, int]:
        """First and last slot of a day, both inclusive."""
        start_epoch, end_epoch = self.day_to_epoch_range(day)
        return (
            self.epoch_start_slot(start_epoch),
            self.epoch_to_slot_range(end_epoch)[1],
        )

    def day_start_time(self, day: int) -> datetime:
        """UTC time of the first slot of a day."""
        start_epoch, _ = self.day_to_epoch_range(day)
        return parse_unix_timestamp(
            self.params.genesis_time + start_epoch * self.seconds_per_epoch
        )

    def latest_complete_day(self, finalized_epoch: int) -> int | None:
        """Last day whose closing snapshot epoch is already finalized.

        The closing snapshot of day ``n`` is taken at the first epoch of day
        ``n + 1``, so that epoch has to be finalized.

        Returns:
            The day index, or None if not even day 0 is complete
        """
        day = finalized_epoch // self.epochs_per_day - 1
        return day if day >= 0 else None


__all__ = ["ChainTimeModel"]
