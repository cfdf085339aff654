"""Capability interface the block analysis needs from a node."""

from typing import Protocol

from blockdiff.helpers.rpc_models import RawBlock, RawReceipt


class ChainQueryClient(Protocol):
    """The four queries the analysis pipeline issues against a node.

    Implemented by blockdiff.helpers.rpc.NodeClient. Transport, framing and
    retries are the implementation's concern; errors it raises propagate
    through the pipeline unchanged.
    """

    async def get_block_by_number(
        self, block: int | str, full_transactions: bool = True
    ) -> RawBlock | None: ...

    async def get_transaction_receipt(self, tx_hash: str) -> RawReceipt | None: ...

    async def get_balance(self, address: str, block: int | str) -> int: ...

    async def get_transaction_count(self, address: str, block: int | str) -> int: ...


__all__ = ["ChainQueryClient"]
