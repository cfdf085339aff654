"""Block analysis pipeline: fetch -> enrich -> diff."""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncio

from blockdiff.analysis.block_fetcher import build_block_record, get_raw_block
from blockdiff.analysis.enricher import enrich_transactions
from blockdiff.analysis.models import BlockAnalysis
from blockdiff.analysis.state_diff import compute_state_changes
from blockdiff.helpers.constants import DEFAULT_CONCURRENCY
from blockdiff.helpers.logging import get_logger


if TYPE_CHECKING:
    from blockdiff.analysis.client import ChainQueryClient


logger = get_logger(__name__)


async def analyze_block(
    client: ChainQueryClient,
    block_number: int | None = None,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    include_state_changes: bool = True,
) -> BlockAnalysis:
    """Analyze one block and the account state changes it caused.

    Issues 1 block query, one receipt query per transaction, and four
    balance/nonce queries per touched address. At most `concurrency` of the
    receipt and state queries are in flight at once. Any error aborts the
    whole analysis; a partial result is never returned. Cancelling the
    calling task cancels every outstanding query.

    Args:
        client: Chain-query client
        block_number: Block to analyze, or None for the chain head
        concurrency: Maximum number of in-flight queries (1 = sequential)
        include_state_changes: When False, skip the address-query phase and
            return the block with an empty change list

    Returns:
        The analyzed block and its sparse list of state changes

    Raises:
        NotFoundError: If the block does not exist
        MissingFieldError: If the block or a transaction lacks a required field
        ProtocolViolationError: If the node returns malformed data
        TransportError: If an RPC call fails

    Example:
        ```python
        async with NodeClient(get_eth_rpc_url()) as node:
            analysis = await analyze_block(node, 7408000, concurrency=20)
            for change in analysis.changes:
                print(change.address, change.balance_delta)
        ```
    """
    if concurrency < 1:
        msg = f"concurrency must be at least 1, got {concurrency}"
        raise ValueError(msg)

    semaphore = asyncio.Semaphore(concurrency)

    raw = await get_raw_block(client, block_number)
    # Header is validated before any receipt query goes out
    header = build_block_record(raw, transactions=())

    transactions = await enrich_transactions(
        client, raw.transactions, semaphore=semaphore
    )
    block = header.model_copy(update={"transactions": tuple(transactions)})

    if not include_state_changes:
        logger.info(
            "Block %d: %d transactions", block.number, len(block.transactions)
        )
        return BlockAnalysis(block=block)

    changes = await compute_state_changes(client, block, semaphore=semaphore)

    logger.info(
        "Block %d: %d transactions, %d state changes",
        block.number,
        len(block.transactions),
        len(changes),
    )
    return BlockAnalysis(block=block, changes=tuple(changes))


__all__ = ["analyze_block"]
