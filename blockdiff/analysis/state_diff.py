"""Derive per-account balance and nonce changes caused by a block.

For every address a block touches (senders, recipients and the proposer) the
balance and nonce are read at the parent block and at the block itself. Only
accounts where either value moved are reported.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncio

from blockdiff.analysis.concurrency import gather_ordered
from blockdiff.analysis.models import StateChange
from blockdiff.helpers.constants import DEFAULT_CONCURRENCY
from blockdiff.helpers.logging import get_logger
from blockdiff.helpers.parsers import normalize_address, to_signed, wrapping_sub


if TYPE_CHECKING:
    from blockdiff.analysis.client import ChainQueryClient
    from blockdiff.analysis.models import BlockRecord


logger = get_logger(__name__)


def collect_addresses(block: BlockRecord) -> set[str]:
    """Collect the distinct addresses referenced by a block.

    Includes every sender, every recipient that is present, and the proposer
    when its rendered address parses. An unparseable proposer is left out.

    Example:
        ```python
        addresses = collect_addresses(block)
        # {"0xaaaa...", "0xbbbb...", "0xminer..."}
        ```
    """
    addresses: set[str] = set()
    for tx in block.transactions:
        addresses.add(tx.from_address)
        if tx.to_address is not None:
            addresses.add(tx.to_address)

    proposer = normalize_address(block.proposer)
    if proposer is not None:
        addresses.add(proposer)
    else:
        logger.debug("Skipping unparseable proposer %r", block.proposer)

    return addresses


def state_delta(current: int, previous: int) -> int:
    """current - previous under 256-bit wraparound, read as two's complement."""
    return to_signed(wrapping_sub(current, previous))


async def diff_address(
    client: ChainQueryClient,
    address: str,
    parent_number: int,
    block_number: int,
    semaphore: asyncio.Semaphore,
) -> StateChange | None:
    """Compare one account between two blocks.

    Issues four queries: balance and nonce at each block.

    Returns:
        A StateChange, or None if neither balance nor nonce changed
    """
    prev_balance, prev_nonce, cur_balance, cur_nonce = await gather_ordered(
        [
            client.get_balance(address, parent_number),
            client.get_transaction_count(address, parent_number),
            client.get_balance(address, block_number),
            client.get_transaction_count(address, block_number),
        ],
        semaphore,
    )

    if prev_balance == cur_balance and prev_nonce == cur_nonce:
        return None

    return StateChange(
        address=address,
        balance_delta=state_delta(cur_balance, prev_balance),
        nonce_delta=state_delta(cur_nonce, prev_nonce),
    )


async def compute_state_changes(
    client: ChainQueryClient,
    block: BlockRecord,
    *,
    semaphore: asyncio.Semaphore | None = None,
) -> list[StateChange]:
    """Compute the state changes of every account touched by a block.

    The parent of block 0 is block 0 itself. Any failed query aborts the
    whole computation.

    Args:
        client: Chain-query client
        block: Block to diff against its parent
        semaphore: Limit on concurrent balance/nonce queries

    Returns:
        One StateChange per changed account, sorted by address
    """
    addresses = sorted(collect_addresses(block))
    parent_number = block.parent_number

    logger.debug(
        "Diffing %d addresses between blocks %d and %d",
        len(addresses),
        parent_number,
        block.number,
    )

    semaphore = semaphore or asyncio.Semaphore(DEFAULT_CONCURRENCY)
    results = await gather_ordered(
        (
            diff_address(client, address, parent_number, block.number, semaphore)
            for address in addresses
        )
    )

    return [change for change in results if change is not None]


__all__ = [
    "collect_addresses",
    "compute_state_changes",
    "diff_address",
    "state_delta",
]
