"""Analyze the account state changes caused by one Ethereum block.

Fetches the block with its transactions, attaches receipt gas usage, and
diffs the balance and nonce of every touched account against the parent
block.

Usage:
    python -m blockdiff.analyze_block --block 7408000
    python -m blockdiff.analyze_block --block latest --json
"""

from argparse import ArgumentParser, ArgumentTypeError, Namespace
from asyncio import run
import sys

from rich.console import Console

from blockdiff.analysis.analyzer import analyze_block
from blockdiff.analysis.display import print_analysis
from blockdiff.helpers.config import (
    get_concurrency_limit,
    get_eth_rpc_url,
    get_log_level,
    get_max_retries,
    get_rpc_timeout,
)
from blockdiff.helpers.errors import BlockAnalysisError
from blockdiff.helpers.logging import get_logger, set_log_handler, set_log_level
from blockdiff.helpers.rpc import NodeClient


logger = get_logger(__name__)


def parse_block_arg(value: str) -> int | None:
    """Parse --block: a decimal or 0x-hex number, or "latest" (None)."""
    if value.lower() == "latest":
        return None
    try:
        number = int(value, 16) if value.lower().startswith("0x") else int(value)
    except ValueError:
        msg = f"invalid block number: {value!r}"
        raise ArgumentTypeError(msg) from None
    if number < 0:
        msg = f"block number cannot be negative: {value}"
        raise ArgumentTypeError(msg)
    return number


def parse_positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        msg = f"expected an integer, got {value!r}"
        raise ArgumentTypeError(msg) from None
    if number < 1:
        msg = f"must be at least 1, got {number}"
        raise ArgumentTypeError(msg)
    return number


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Analyze balance and nonce changes caused by a block"
    )
    parser.add_argument(
        "--block",
        type=parse_block_arg,
        default=None,
        help="Block number (decimal or 0x-hex) or 'latest' (default: latest)",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="JSON-RPC endpoint (default: ETH_RPC_URL)",
    )
    parser.add_argument(
        "--concurrency",
        type=parse_positive_int,
        default=None,
        help="Maximum in-flight RPC queries (default: ANALYSIS_CONCURRENCY or 10)",
    )
    parser.add_argument(
        "--block-only",
        action="store_true",
        help="Only fetch block and transaction info, skip state changes",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the analysis as JSON instead of tables",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    return parser


async def main(args: Namespace, console: Console | None = None) -> int:
    """Run one analysis and print it.

    Args:
        args: Parsed command-line arguments
        console: Console to print to (default: stdout)

    Returns:
        Process exit status
    """
    console = console or Console()

    try:
        if args.json:
            # stdout carries the JSON document only
            set_log_handler("stderr")
        set_log_level(args.log_level or get_log_level())
        rpc_url = get_eth_rpc_url(args.rpc_url)
        concurrency = args.concurrency or get_concurrency_limit()
        timeout = get_rpc_timeout()
        max_retries = get_max_retries()
    except ValueError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        return 1

    try:
        async with NodeClient(
            rpc_url, timeout=timeout, max_retries=max_retries
        ) as node:
            analysis = await analyze_block(
                node,
                args.block,
                concurrency=concurrency,
                include_state_changes=not args.block_only,
            )
    except BlockAnalysisError as e:
        logger.error("Analysis failed: %s", e)
        console.print(f"Error: {e}", style="red", markup=False)
        return 1

    if args.json:
        console.print_json(analysis.model_dump_json(), indent=2)
    else:
        print_analysis(analysis, console, show_changes=not args.block_only)
    return 0


def cli(argv: list[str] | None = None) -> None:
    """Console script entry point."""
    args = build_parser().parse_args(argv)
    sys.exit(run(main(args)))


if __name__ == "__main__":
    cli()
