"""Lookup structure over one validator snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from src.ethstore.beacon_models import BeaconValidator
from src.ethstore.errors import MalformedSnapshot
from src.ethstore.models import ValidatorSnapshot


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


def normalize_pubkey(pubkey: str) -> str:
    return pubkey.lower()


def snapshot_from_beacon(entry: BeaconValidator) -> ValidatorSnapshot:
    """Flatten a Beacon API validator entry into a snapshot record."""
    return ValidatorSnapshot(
        index=entry.index,
        pubkey=normalize_pubkey(entry.validator.pubkey),
        balance=entry.balance,
        effective_balance=entry.validator.effective_balance,
        status=entry.status,
        slashed=entry.validator.slashed,
        activation_epoch=entry.validator.activation_epoch,
        exit_epoch=entry.validator.exit_epoch,
    )


class ValidatorSnapshotIndex:
    """Validators of one state, addressable by index and by public key."""

    def __init__(self, validators: Iterable[ValidatorSnapshot]) -> None:
        """Index a snapshot.

        Args:
            validators: Snapshot records in any order

        Raises:
            MalformedSnapshot: On a duplicate index or public key
        """
        by_index: dict[int, ValidatorSnapshot] = {}
        by_pubkey: dict[str, int] = {}

        for validator in validators:
            if validator.index in by_index:
                msg = f"Duplicate validator index {validator.index}"
                raise MalformedSnapshot(msg)
            pubkey = normalize_pubkey(validator.pubkey)
            if pubkey in by_pubkey:
                msg = (
                    f"Duplicate pubkey {pubkey} for validators "
                    f"{by_pubkey[pubkey]} and {validator.index}"
                )
                raise MalformedSnapshot(msg)
            by_index[validator.index] = validator
            by_pubkey[pubkey] = validator.index

        self._by_index = dict(sorted(by_index.items()))
        self._by_pubkey = by_pubkey

    @classmethod
    def from_raw(cls, entries: Iterable[dict[str, Any]]) -> ValidatorSnapshotIndex:
        """Index raw Beacon API validator entries.

        Raises:
            MalformedSnapshot: If an entry does not parse, or on duplicates
        """
        validators: list[ValidatorSnapshot] = []
        for position, entry in enumerate(entries):
            try:
                parsed = BeaconValidator.model_validate(entry)
            except ValidationError as e:
                msg = f"Unparsable validator entry at position {position}: {e}"
                raise MalformedSnapshot(msg) from e
            validators.append(snapshot_from_beacon(parsed))
        return cls(validators)

    def get(self, index: int) -> ValidatorSnapshot | None:
        return self._by_index.get(index)

    def index_of(self, pubkey: str) -> int | None:
        """Validator index owning a public key, if it is in this snapshot."""
        return self._by_pubkey.get(normalize_pubkey(pubkey))

    def __contains__(self, index: object) -> bool:
        return index in self._by_index

    def __len__(self) -> int:
        return len(self._by_index)

    def __iter__(self) -> Iterator[ValidatorSnapshot]:
        return iter(self._by_index.values())


__all__ = ["ValidatorSnapshotIndex", "normalize_pubkey", "snapshot_from_beacon"]
