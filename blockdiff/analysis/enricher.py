"""Attach receipt data to the transactions of a block."""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncio

from blockdiff.analysis.concurrency import gather_ordered
from blockdiff.analysis.models import TransactionRecord
from blockdiff.helpers.constants import DEFAULT_CONCURRENCY
from blockdiff.helpers.errors import MissingFieldError, ProtocolViolationError
from blockdiff.helpers.logging import get_logger
from blockdiff.helpers.parsers import parse_hex_int, parse_optional_hex_int


if TYPE_CHECKING:
    from collections.abc import Sequence

    from blockdiff.analysis.client import ChainQueryClient
    from blockdiff.helpers.rpc_models import RawTransaction


logger = get_logger(__name__)


def transaction_from_raw(raw: RawTransaction | str, index: int) -> TransactionRecord:
    """Build a TransactionRecord (without gas usage) from a raw transaction.

    Args:
        raw: Transaction object from the block response
        index: Position of the transaction in the block

    Raises:
        ProtocolViolationError: If raw is a bare hash instead of an object
        MissingFieldError: If the hash, sender or value is absent
    """
    if isinstance(raw, str):
        msg = (
            f"Transaction at index {index} is a bare hash ({raw}); "
            "the node did not return full transaction objects"
        )
        raise ProtocolViolationError(msg)

    context = f"transaction {raw.hash or '<unknown hash>'} (index {index})"
    if raw.hash is None:
        raise MissingFieldError("hash", context)
    if raw.from_address is None:
        raise MissingFieldError("from", context)
    if raw.value is None:
        raise MissingFieldError("value", context)

    try:
        return TransactionRecord(
            hash=raw.hash,
            from_address=raw.from_address,
            to_address=raw.to_address,
            value=parse_hex_int(raw.value),
        )
    except ValueError as e:
        msg = f"{context} is malformed: {e}"
        raise ProtocolViolationError(msg) from e


async def _gas_used(client: ChainQueryClient, tx_hash: str) -> int | None:
    receipt = await client.get_transaction_receipt(tx_hash)
    if receipt is None:
        logger.debug("No receipt for %s", tx_hash)
        return None
    try:
        return parse_optional_hex_int(receipt.gas_used)
    except ValueError as e:
        msg = f"Receipt for {tx_hash} has invalid gasUsed {receipt.gas_used!r}"
        raise ProtocolViolationError(msg) from e


async def enrich_transactions(
    client: ChainQueryClient,
    raw_transactions: Sequence[RawTransaction | str],
    *,
    semaphore: asyncio.Semaphore | None = None,
) -> list[TransactionRecord]:
    """Fetch every transaction's receipt and build its TransactionRecord.

    All transactions are validated before any receipt is requested, so a
    malformed one aborts the run without further queries. Receipts are then
    fetched concurrently and the output keeps the input order.

    Args:
        client: Chain-query client
        raw_transactions: Transactions in block order
        semaphore: Limit on concurrent receipt queries

    Returns:
        One record per input transaction, same order

    Raises:
        MissingFieldError: If a transaction has no sender
    """
    records = [
        transaction_from_raw(tx, index) for index, tx in enumerate(raw_transactions)
    ]

    gas = await gather_ordered(
        (_gas_used(client, record.hash) for record in records),
        semaphore or asyncio.Semaphore(DEFAULT_CONCURRENCY),
    )

    logger.debug("Enriched %d transactions", len(records))
    return [
        record.model_copy(update={"gas_used": gas_used})
        for record, gas_used in zip(records, gas, strict=True)
    ]


__all__ = ["enrich_transactions", "transaction_from_raw"]
