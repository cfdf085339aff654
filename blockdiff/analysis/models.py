"""Pydantic models for analyzed blocks and account state changes."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blockdiff.helpers.constants import UINT256_BITS
from blockdiff.helpers.parsers import normalize_address, normalize_hash


def _address(value: str) -> str:
    normalized = normalize_address(value)
    if normalized is None:
        msg = f"Invalid 20-byte address: {value!r}"
        raise ValueError(msg)
    return normalized


class TransactionRecord(BaseModel):
    """One transaction of a block, enriched with its receipt's gas usage."""

    hash: str = Field(..., description="32-byte transaction hash")
    from_address: str = Field(..., description="Sender address")
    to_address: str | None = Field(
        default=None, description="Recipient address, None for contract creation"
    )
    value: int = Field(..., ge=0, description="Transferred value in wei")
    gas_used: int | None = Field(
        default=None, ge=0, description="Gas used from the receipt, if available"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("hash")
    @classmethod
    def _check_hash(cls, value: str) -> str:
        normalized = normalize_hash(value)
        if normalized is None:
            msg = f"Invalid 32-byte hash: {value!r}"
            raise ValueError(msg)
        return normalized

    @field_validator("from_address")
    @classmethod
    def _check_from(cls, value: str) -> str:
        return _address(value)

    @field_validator("to_address")
    @classmethod
    def _check_to(cls, value: str | None) -> str | None:
        return None if value is None else _address(value)


class BlockRecord(BaseModel):
    """Snapshot of one block and its transactions in inclusion order."""

    number: int = Field(..., ge=0)
    timestamp: int = Field(..., ge=0)
    hash: str
    parent_hash: str
    nonce: str | None = None
    proposer: str = Field(..., description="Rendered address of the block author")
    difficulty: str = Field(..., description="Decimal rendering, arbitrary precision")
    total_difficulty: str | None = None
    size: int = Field(default=0, ge=0)
    gas_used: int = Field(..., ge=0)
    gas_limit: int = Field(..., ge=0)
    transactions: tuple[TransactionRecord, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def parent_number(self) -> int:
        """Number of the parent block; genesis is its own parent."""
        return max(self.number - 1, 0)


class StateChange(BaseModel):
    """Balance and nonce delta of one account across parent -> block.

    Deltas are current minus previous, computed modulo 2**256 and read back as
    two's complement, so a decrease is negative and nothing ever overflows.
    """

    address: str
    balance_delta: int | None = None
    nonce_delta: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def balance_delta_unsigned(self) -> int | None:
        """The balance delta as the raw wrapped 256-bit unsigned value."""
        if self.balance_delta is None:
            return None
        return self.balance_delta % (1 << UINT256_BITS)

    @property
    def nonce_delta_unsigned(self) -> int | None:
        """The nonce delta as the raw wrapped 256-bit unsigned value."""
        if self.nonce_delta is None:
            return None
        return self.nonce_delta % (1 << UINT256_BITS)


class BlockAnalysis(BaseModel):
    """A block together with the account state changes it caused."""

    block: BlockRecord
    changes: tuple[StateChange, ...] = ()

    model_config = ConfigDict(frozen=True)


__all__ = [
    "BlockAnalysis",
    "BlockRecord",
    "StateChange",
    "TransactionRecord",
]
