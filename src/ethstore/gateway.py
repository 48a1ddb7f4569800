"""Access to the chain data of a beacon node."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Self, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.ethstore.beacon_models import (
    BlockResponse,
    FinalityCheckpointsResponse,
    GenesisResponse,
    SpecResponse,
    ValidatorsResponse,
)
from src.ethstore.errors import GatewayUnavailable, MalformedResponse, MalformedSnapshot
from src.ethstore.fees import NullFeeExtractor
from src.ethstore.models import BlockRecord, Deposit, NetworkTimeParams
from src.ethstore.settings import Settings
from src.ethstore.snapshot import normalize_pubkey, snapshot_from_beacon
from src.helpers.http import create_http_client, retry_with_backoff
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    import logging
    from types import TracebackType

    from src.ethstore.fees import FeeExtractor
    from src.ethstore.models import ValidatorSnapshot
    from src.helpers.http_models import JsonObject


ModelT = TypeVar("ModelT", bound=BaseModel)

GENESIS_PATH = "/eth/v1/beacon/genesis"
SPEC_PATH = "/eth/v1/config/spec"
FINALITY_PATH = "/eth/v1/beacon/states/head/finality_checkpoints"
VALIDATORS_PATH = "/eth/v1/beacon/states/{state_id}/validators"
BLOCK_PATH = "/eth/v2/beacon/blocks/{block_id}"


class ChainDataGateway(Protocol):
    """What a day calculation needs to know about the chain."""

    async def get_network_params(self) -> NetworkTimeParams: ...

    async def get_finalized_epoch(self) -> int: ...

    async def get_validators(self, state_slot: int) -> list[ValidatorSnapshot]: ...

    async def get_block(self, slot: int) -> BlockRecord: ...

    async def aclose(self) -> None: ...


class BeaconGateway:
    """Chain data from the standard Beacon REST API.

    Timeouts, transport errors, HTTP 429 and 5xx answers are retried with
    exponential backoff; once the retry budget is spent the request fails with
    :class:`GatewayUnavailable`. A 404 for a block means the slot was missed.

    The gateway owns its HTTP client and the fee extractor handed to it; use it
    as an async context manager or call :meth:`aclose`.
    """

    def __init__(
        self,
        beacon_url: str,
        *,
        settings: Settings | None = None,
        fee_extractor: FeeExtractor | None = None,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            beacon_url: Base URL of the beacon node API
            settings: Timeout and retry settings
            fee_extractor: Prices execution payloads, no fees when omitted
            client: HTTP client to use instead of creating one
            logger: Logger of the calling calculation, this module's when omitted

        Raises:
            ValueError: If beacon_url is empty or None
        """
        if not beacon_url:
            msg = "Beacon URL cannot be empty"
            raise ValueError(msg)

        self.beacon_url = beacon_url.rstrip("/")
        self.settings = settings or Settings()
        self.fee_extractor = fee_extractor or NullFeeExtractor()
        self.logger = logger or get_logger(__name__)
        self._client = client or create_http_client(
            timeout=self.settings.request_timeout
        )
        self._owns_client = client is None
        self._get_json = retry_with_backoff(
            max_retries=self.settings.max_retries,
            base_delay=self.settings.retry_base_delay,
            max_delay=self.settings.retry_max_delay,
            log=self.logger,
        )(self._request_json)

    async def _request_json(
        self, path: str, *, allow_missing: bool = False
    ) -> JsonObject | None:
        response = await self._client.get(
            f"{self.beacon_url}{path}", timeout=self.settings.request_timeout
        )
        if allow_missing and response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return response.json()

    async def _fetch(self, path: str, *, allow_missing: bool = False) -> JsonObject | None:
        try:
            return await self._get_json(path, allow_missing=allow_missing)
        except httpx.HTTPError as e:
            msg = f"GET {path} failed: {e}"
            raise GatewayUnavailable(msg) from e
        except ValueError as e:
            msg = f"GET {path} returned invalid JSON: {e}"
            raise MalformedResponse(msg) from e

    async def _fetch_model(
        self,
        path: str,
        model: type[ModelT],
        error: type[MalformedResponse] = MalformedResponse,
    ) -> ModelT:
        payload = await self._fetch(path)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            msg = f"Unexpected response from {path}: {e}"
            raise error(msg) from e

    async def get_genesis_time(self) -> int:
        genesis = await self._fetch_model(GENESIS_PATH, GenesisResponse)
        return genesis.data.genesis_time

    async def get_spec(self) -> SpecResponse.Data:
        spec = await self._fetch_model(SPEC_PATH, SpecResponse)
        return spec.data

    async def get_network_params(self) -> NetworkTimeParams:
        """Genesis time and slot timing of the network."""
        genesis_time = await self.get_genesis_time()
        spec = await self.get_spec()
        return NetworkTimeParams(
            genesis_time=genesis_time,
            seconds_per_slot=spec.SECONDS_PER_SLOT,
            slots_per_epoch=spec.SLOTS_PER_EPOCH,
        )

    async def get_finalized_epoch(self) -> int:
        checkpoints = await self._fetch_model(
            FINALITY_PATH, FinalityCheckpointsResponse
        )
        return checkpoints.data.finalized.epoch

    async def get_validators(self, state_slot: int) -> list[ValidatorSnapshot]:
        """Every validator in the state at a slot.

        Raises:
            MalformedSnapshot: If the validator list does not parse
        """
        path = VALIDATORS_PATH.format(state_id=state_slot)
        response = await self._fetch_model(path, ValidatorsResponse, MalformedSnapshot)
        self.logger.debug(
            "Fetched %d validators at slot %d", len(response.data), state_slot
        )
        return [snapshot_from_beacon(entry) for entry in response.data]

    async def get_block(self, slot: int) -> BlockRecord:
        """Proposer, deposits and fee income of the block at a slot."""
        path = BLOCK_PATH.format(block_id=slot)
        payload = await self._fetch(path, allow_missing=True)
        if payload is None:
            self.logger.debug("Slot %d was missed", slot)
            return BlockRecord.missed(slot)

        try:
            message = BlockResponse.model_validate(payload).data.message
        except ValidationError as e:
            msg = f"Unexpected block at slot {slot}: {e}"
            raise MalformedResponse(msg) from e
        if message.slot != slot:
            msg = f"Asked for slot {slot}, got block of slot {message.slot}"
            raise MalformedResponse(msg)

        execution_payload = message.body.execution_payload
        fee_earned = (
            await self.fee_extractor.fee_earned(execution_payload)
            if execution_payload is not None
            else 0
        )
        return BlockRecord(
            slot=slot,
            proposer_index=message.proposer_index,
            deposits=tuple(
                Deposit(
                    pubkey=normalize_pubkey(deposit.data.pubkey),
                    amount=deposit.data.amount,
                )
                for deposit in message.body.deposits
            ),
            fee_earned=fee_earned,
        )

    async def aclose(self) -> None:
        await self.fee_extractor.aclose()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ["BeaconGateway", "ChainDataGateway"]
