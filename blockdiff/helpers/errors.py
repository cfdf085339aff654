"""Typed failures raised while analyzing a block.

Every error aborts the current analysis. Nothing in the pipeline catches these
to produce a partial result; callers that want resilience wrap the whole call.
"""

from typing import Any


class BlockAnalysisError(Exception):
    """Base class for all block analysis failures."""


class NotFoundError(BlockAnalysisError):
    """The node has no block at the requested identifier."""

    def __init__(self, block_identifier: int | str) -> None:
        self.block_identifier = block_identifier
        super().__init__(f"Block not found: {block_identifier}")


class ProtocolViolationError(BlockAnalysisError):
    """A node response broke an invariant the pipeline relies on."""


class MissingFieldError(ProtocolViolationError):
    """A required field is absent from a node response.

    Args:
        field: Name of the missing field as it appears on the wire
        context: Where the field was expected, e.g. "transaction 0xab.. (index 3)"
    """

    def __init__(self, field: str, context: str) -> None:
        self.field = field
        self.context = context
        super().__init__(f"{context} is missing required field '{field}'")


class TransportError(BlockAnalysisError):
    """The RPC call itself failed (connection, timeout, HTTP status, bad JSON)."""

    def __init__(self, method: str, params: list[Any], reason: str) -> None:
        self.method = method
        self.params = params
        self.reason = reason
        super().__init__(f"{method}({_format_params(params)}) failed: {reason}")


class RPCError(TransportError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, method: str, params: list[Any], error: Any) -> None:
        self.error = error
        super().__init__(method, params, f"RPC error: {error}")


def _format_params(params: list[Any]) -> str:
    return ", ".join(repr(p) for p in params)


__all__ = [
    "BlockAnalysisError",
    "MissingFieldError",
    "NotFoundError",
    "ProtocolViolationError",
    "RPCError",
    "TransportError",
]
