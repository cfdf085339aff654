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


class EthGetBlockByNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBlockByNumber."""

    method: str = Field(default="eth_getBlockByNumber", frozen=True)


class EthGetTransactionReceiptRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getTransactionReceipt."""

    method: str = Field(default="eth_getTransactionReceipt", frozen=True)


class EthGetBalanceRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBalance."""

    method: str = Field(default="eth_getBalance", frozen=True)


class EthGetTransactionCountRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getTransactionCount."""

    method: str = Field(default="eth_getTransactionCount", frozen=True)


# Raw response payloads. Every field is optional here; the analysis layer
# decides which ones are required and raises typed errors when they are absent.


class RawTransaction(BaseModel):
    """Transaction object embedded in an eth_getBlockByNumber response."""

    hash: str | None = None
    from_address: str | None = Field(default=None, alias="from")
    to_address: str | None = Field(default=None, alias="to")
    value: str | None = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RawBlock(BaseModel):
    """Block object returned by eth_getBlockByNumber with full transactions."""

    number: str | None = None
    hash: str | None = None
    parent_hash: str | None = Field(default=None, alias="parentHash")
    nonce: str | None = None
    miner: str | None = None
    difficulty: str | None = None
    total_difficulty: str | None = Field(default=None, alias="totalDifficulty")
    size: str | None = None
    gas_used: str | None = Field(default=None, alias="gasUsed")
    gas_limit: str | None = Field(default=None, alias="gasLimit")
    timestamp: str | None = None
    # Hashes only show up here if the node ignored the full-transactions flag
    transactions: list[RawTransaction | str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RawReceipt(BaseModel):
    """Receipt object returned by eth_getTransactionReceipt."""

    gas_used: str | None = Field(default=None, alias="gasUsed")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


__all__ = [
    "EthGetBalanceRequest",
    "EthGetBlockByNumberRequest",
    "EthGetTransactionCountRequest",
    "EthGetTransactionReceiptRequest",
    "JsonRpcRequest",
    "RawBlock",
    "RawReceipt",
    "RawTransaction",
]
