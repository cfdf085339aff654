"""Pytest configuration and shared fixtures for block analysis tests."""

from collections.abc import Iterator

import logging

import pytest

from fakes import (
    ADDR_A,
    ADDR_B,
    ADDR_C,
    MINER,
    FakeChainClient,
    raw_block,
    raw_tx,
    tx_hash,
)

from blockdiff.helpers import logging as log_helpers


@pytest.fixture
def scenario_client() -> FakeChainClient:
    """Block 100 with A->B 10 wei and C->A 5 wei.

    Parent balances A=100, B=0, C=50; current A=95, B=10, C=45.
    The miner's balance and nonce do not change.
    """
    block = raw_block(
        100,
        [raw_tx(0, ADDR_A, ADDR_B, 10), raw_tx(1, ADDR_C, ADDR_A, 5)],
    )
    return FakeChainClient(
        blocks={100: block},
        receipts={
            tx_hash(0): {"transactionHash": tx_hash(0), "gasUsed": "0x5208"},
            tx_hash(1): {"transactionHash": tx_hash(1), "gasUsed": "0x5208"},
        },
        balances={
            (ADDR_A, 99): 100,
            (ADDR_B, 99): 0,
            (ADDR_C, 99): 50,
            (ADDR_A, 100): 95,
            (ADDR_B, 100): 10,
            (ADDR_C, 100): 45,
            (MINER, 99): 7,
            (MINER, 100): 7,
        },
        nonces={
            (ADDR_A, 99): 3,
            (ADDR_A, 100): 4,
            (ADDR_C, 99): 0,
            (ADDR_C, 100): 1,
        },
    )


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo level and stream changes the CLI applies to cached loggers."""
    defaults = dict(log_helpers.defaults)
    state = [
        (
            logger,
            logger.level,
            [(h, h.level, getattr(h, "stream", None)) for h in logger.handlers],
        )
        for logger in log_helpers.loggers.values()
    ]
    yield
    log_helpers.defaults.update(defaults)
    created = log_helpers.loggers.keys() - {logger.name for logger, _, _ in state}
    for name in created:
        logger = log_helpers.loggers.pop(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
    for logger, level, handlers in state:
        logger.setLevel(level)
        for handler, handler_level, stream in handlers:
            handler.setLevel(handler_level)
            # setStream would flush the capture stream, which may be closed by now
            if isinstance(handler, logging.StreamHandler):
                handler.stream = stream
