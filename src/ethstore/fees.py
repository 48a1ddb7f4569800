"""Execution-layer fee income of a proposed block."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Self

import httpx
from pydantic import ValidationError

from src.ethstore.errors import GatewayUnavailable, MalformedResponse
from src.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from src.helpers.http import create_http_client, retry_with_backoff
from src.helpers.logging import get_logger
from src.helpers.parsers import parse_hex_int
from src.helpers.rpc import RPCClient, RPCError
from src.helpers.rpc_models import TransactionReceipt


if TYPE_CHECKING:
    import logging
    from types import TracebackType

    from src.ethstore.beacon_models import ExecutionPayload


class FeeExtractor(Protocol):
    """Turns an execution payload into the Wei its proposer earned."""

    async def fee_earned(self, payload: ExecutionPayload) -> int: ...

    async def aclose(self) -> None: ...


class NullFeeExtractor:
    """Counts no fee income at all (consensus rewards only)."""

    async def fee_earned(self, payload: ExecutionPayload) -> int:
        return 0

    async def aclose(self) -> None:
        return None


def priority_fees(receipts: list[TransactionReceipt], base_fee_per_gas: int) -> int:
    """Sum what each transaction paid above the burned base fee.

    Args:
        receipts: Receipts of every transaction in the block
        base_fee_per_gas: Base fee of the block in Wei, 0 before London

    Returns:
        Fee income of the proposer in Wei

    Raises:
        MalformedResponse: If a transaction paid less than the base fee
    """
    total = 0
    for receipt in receipts:
        gas_used = parse_hex_int(receipt.gas_used)
        gas_price = parse_hex_int(receipt.effective_gas_price)
        if gas_price < base_fee_per_gas:
            msg = (
                f"Transaction {receipt.transaction_hash} paid {gas_price} per gas, "
                f"below the base fee {base_fee_per_gas}"
            )
            raise MalformedResponse(msg)
        total += gas_used * (gas_price - base_fee_per_gas)
    return total


class ReceiptsFeeExtractor:
    """Prices a block from its receipts on an execution-layer node."""

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
        retry_max_delay: float = RETRY_MAX_DELAY,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            rpc_url: Execution-layer JSON-RPC endpoint
            timeout: Timeout of every RPC request in seconds
            max_retries: Attempts per block before giving up
            retry_base_delay: First backoff delay in seconds
            retry_max_delay: Backoff delay cap in seconds
            client: HTTP client to use instead of creating one
            logger: Logger of the calling calculation, this module's when omitted
        """
        self.rpc = RPCClient(rpc_url, timeout=timeout)
        self._client = client or create_http_client(timeout=timeout)
        self._owns_client = client is None
        self.logger = logger or get_logger(__name__)
        self._fetch_receipts = retry_with_backoff(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            max_delay=retry_max_delay,
            log=self.logger,
        )(self._get_receipts)

    async def _get_receipts(self, block_number: int) -> list[dict]:
        return await self.rpc.get_block_receipts(self._client, block_number)

    async def fee_earned(self, payload: ExecutionPayload) -> int:
        """Priority fees of every transaction in the payload's block.

        Raises:
            GatewayUnavailable: If the node cannot be reached
            MalformedResponse: If the receipts do not parse or match the payload
        """
        if not payload.transactions:
            return 0

        try:
            raw_receipts = await self._fetch_receipts(payload.block_number)
        except RPCError as e:
            msg = f"Receipts of block {payload.block_number} unavailable: {e}"
            raise MalformedResponse(msg) from e
        except httpx.HTTPError as e:
            msg = f"Execution node failed for block {payload.block_number}: {e}"
            raise GatewayUnavailable(msg) from e

        try:
            receipts = [TransactionReceipt.model_validate(r) for r in raw_receipts]
        except ValidationError as e:
            msg = f"Unparsable receipts for block {payload.block_number}: {e}"
            raise MalformedResponse(msg) from e

        if len(receipts) != len(payload.transactions):
            msg = (
                f"Block {payload.block_number} has {len(payload.transactions)} "
                f"transactions but {len(receipts)} receipts"
            )
            raise MalformedResponse(msg)

        fee = priority_fees(receipts, payload.base_fee_per_gas or 0)
        self.logger.debug("Block %d earned %d wei in fees", payload.block_number, fee)
        return fee

    async def aclose(self) -> None:
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


__all__ = [
    "FeeExtractor",
    "NullFeeExtractor",
    "ReceiptsFeeExtractor",
    "priority_fees",
]
