"""Ethereum JSON-RPC client utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from src.helpers.rpc_models import JsonRpcRequest


if TYPE_CHECKING:
    import httpx


class RPCError(ValueError):
    """JSON-RPC error object returned by the node."""


class RPCClient:
    """Ethereum JSON-RPC client for single calls."""

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout

    async def call(
        self,
        client: httpx.AsyncClient,
        method: str,
        params: list[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a single JSON-RPC call.

        Args:
            client: HTTP client instance
            method: RPC method name (e.g., "eth_getBlockReceipts")
            params: Method parameters list
            timeout: Optional timeout override

        Returns:
            RPC result value

        Raises:
            httpx.HTTPError: If the HTTP request fails
            RPCError: If the RPC response contains an error
        """
        payload = JsonRpcRequest(method=method, params=params or [], id=1)

        response = await client.post(
            self.rpc_url,
            json=payload.model_dump(),
            timeout=timeout or self.timeout,
        )
        response.raise_for_status()
        result = response.json()

        if "error" in result:
            msg = f"RPC error: {result['error']}"
            raise RPCError(msg)

        return result.get("result")

    async def get_block_receipts(
        self,
        client: httpx.AsyncClient,
        block_number: int,
    ) -> list[dict[str, Any]]:
        """Get all transaction receipts of a block.

        Args:
            client: HTTP client instance
            block_number: Execution block number

        Returns:
            List of receipt objects, empty for a block without transactions

        Example:
            ```python
            rpc = RPCClient(rpc_url)
            async with httpx.AsyncClient() as client:
                receipts = await rpc.get_block_receipts(client, 15537394)
            ```
        """
        result = await self.call(client, "eth_getBlockReceipts", [hex(block_number)])
        return result or []


__all__ = [
    "RPCClient",
    "RPCError",
]
