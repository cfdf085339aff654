"""Fetch a block with its transactions and normalize it into a BlockRecord."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from blockdiff.analysis.enricher import transaction_from_raw
from blockdiff.analysis.models import BlockRecord
from blockdiff.helpers.constants import LATEST_BLOCK
from blockdiff.helpers.errors import (
    MissingFieldError,
    NotFoundError,
    ProtocolViolationError,
)
from blockdiff.helpers.logging import get_logger
from blockdiff.helpers.parsers import normalize_address, parse_hex_int


if TYPE_CHECKING:
    from collections.abc import Sequence

    from blockdiff.analysis.client import ChainQueryClient
    from blockdiff.analysis.models import TransactionRecord
    from blockdiff.helpers.rpc_models import RawBlock


logger = get_logger(__name__)


async def get_raw_block(
    client: ChainQueryClient, block_number: int | None
) -> RawBlock:
    """Fetch the raw block with full transaction objects.

    Args:
        client: Chain-query client
        block_number: Block to fetch, or None for the chain head

    Returns:
        The raw block as returned by the node

    Raises:
        NotFoundError: If the node has no block at that identifier
    """
    identifier: int | str = LATEST_BLOCK if block_number is None else block_number
    raw = await client.get_block_by_number(identifier, full_transactions=True)
    if raw is None:
        raise NotFoundError(identifier)

    logger.debug(
        "Fetched block %s with %d transactions", raw.number, len(raw.transactions)
    )
    return raw


def _required(value: str | None, wire_name: str, context: str) -> str:
    if value is None:
        raise MissingFieldError(wire_name, context)
    return value


def _quantity(value: str | None, wire_name: str, context: str) -> int:
    try:
        return parse_hex_int(value)
    except ValueError as e:
        msg = f"{context} has invalid {wire_name}: {value!r}"
        raise ProtocolViolationError(msg) from e


def build_block_record(
    raw: RawBlock,
    transactions: Sequence[TransactionRecord] | None = None,
) -> BlockRecord:
    """Normalize a raw block into a BlockRecord.

    A missing hash becomes "" and a missing size or difficulty becomes 0.
    The number, timestamp, parent hash and gas fields are required.

    Args:
        raw: Block as returned by the node
        transactions: Enriched records in block order. When None, records
            are built straight from the raw transactions without gas usage.

    Raises:
        MissingFieldError: If a required field is absent
        ProtocolViolationError: If a header quantity is not valid hex, or the
            node returned transaction hashes only
    """
    context = f"block {raw.hash or '<unknown hash>'}"
    number = _quantity(_required(raw.number, "number", context), "number", context)
    context = f"block {number}"

    if transactions is None:
        transactions = [
            transaction_from_raw(tx, index) for index, tx in enumerate(raw.transactions)
        ]

    total_difficulty = (
        None
        if raw.total_difficulty is None
        else _quantity(raw.total_difficulty, "totalDifficulty", context)
    )
    timestamp = _required(raw.timestamp, "timestamp", context)
    gas_used = _required(raw.gas_used, "gasUsed", context)
    gas_limit = _required(raw.gas_limit, "gasLimit", context)

    try:
        return BlockRecord(
            number=number,
            timestamp=_quantity(timestamp, "timestamp", context),
            hash=raw.hash or "",
            parent_hash=_required(raw.parent_hash, "parentHash", context),
            nonce=raw.nonce,
            proposer=normalize_address(raw.miner) or raw.miner or "",
            difficulty=str(_quantity(raw.difficulty, "difficulty", context)),
            total_difficulty=(
                None if total_difficulty is None else str(total_difficulty)
            ),
            size=_quantity(raw.size, "size", context),
            gas_used=_quantity(gas_used, "gasUsed", context),
            gas_limit=_quantity(gas_limit, "gasLimit", context),
            transactions=tuple(transactions),
        )
    except ValidationError as e:
        msg = f"{context} is malformed: {e}"
        raise ProtocolViolationError(msg) from e


async def fetch_block(
    client: ChainQueryClient, block_number: int | None = None
) -> BlockRecord:
    """Fetch a block in a single round trip.

    Transactions carry no gas usage; enrich_transactions adds it.

    Raises:
        NotFoundError: If the node has no block at that identifier
        MissingFieldError: If the block or one of its transactions is malformed
    """
    return build_block_record(await get_raw_block(client, block_number))


__all__ = ["build_block_record", "fetch_block", "get_raw_block"]
