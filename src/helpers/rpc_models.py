"""Pydantic models for JSON-RPC requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(..., description="Request ID")


class TransactionReceipt(BaseModel):
    """The receipt fields needed to price a transaction."""

    transaction_hash: str | None = Field(default=None, alias="transactionHash")
    gas_used: str = Field(..., description="Gas used as hex string", alias="gasUsed")
    effective_gas_price: str = Field(
        ...,
        description="Price paid per gas as hex string",
        alias="effectiveGasPrice",
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)


__all__ = [
    "JsonRpcRequest",
    "TransactionReceipt",
]
