"""Render a BlockAnalysis to the terminal with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from blockdiff.helpers.parsers import wei_to_eth


if TYPE_CHECKING:
    from blockdiff.analysis.models import BlockAnalysis, BlockRecord, StateChange


def _optional(value: object) -> str:
    return "-" if value is None else str(value)


def _signed(value: int | None) -> str:
    if value is None:
        return "-"
    return f"{value:+,}"


def block_table(block: BlockRecord) -> Table:
    """Key/value table of the block header."""
    table = Table(title=f"Block {block.number:,}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Number", str(block.number))
    table.add_row("Timestamp", str(block.timestamp))
    table.add_row("Hash", block.hash or "-")
    table.add_row("Parent Hash", block.parent_hash)
    table.add_row("Nonce", _optional(block.nonce))
    table.add_row("Miner", block.proposer or "-")
    table.add_row("Difficulty", block.difficulty)
    table.add_row("Total Difficulty", _optional(block.total_difficulty))
    table.add_row("Size", f"{block.size:,}")
    table.add_row("Gas Used", f"{block.gas_used:,}")
    table.add_row("Gas Limit", f"{block.gas_limit:,}")
    return table


def transactions_table(block: BlockRecord) -> Table:
    """One row per transaction, in block order."""
    table = Table(title=f"Transactions ({len(block.transactions)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Hash", style="cyan", no_wrap=True)
    table.add_column("From", style="magenta", no_wrap=True)
    table.add_column("To", style="magenta", no_wrap=True)
    table.add_column("Value (wei)", justify="right", style="green")
    table.add_column("Gas Used", justify="right", style="yellow")

    for index, tx in enumerate(block.transactions):
        table.add_row(
            str(index),
            tx.hash,
            tx.from_address,
            tx.to_address or "[dim]contract creation[/dim]",
            f"{tx.value:,}",
            "-" if tx.gas_used is None else f"{tx.gas_used:,}",
        )
    return table


def changes_table(changes: tuple[StateChange, ...]) -> Table:
    """One row per changed account."""
    table = Table(title=f"State Changes ({len(changes)})")
    table.add_column("Address", style="cyan", no_wrap=True)
    table.add_column("Balance Change (wei)", justify="right")
    table.add_column("Balance Change (ETH)", justify="right")
    table.add_column("Nonce Change", justify="right")

    for change in changes:
        color = "green" if (change.balance_delta or 0) >= 0 else "red"
        eth = wei_to_eth(change.balance_delta)
        table.add_row(
            change.address,
            f"[{color}]{_signed(change.balance_delta)}[/{color}]",
            "-" if eth is None else f"{eth:+f}",
            _signed(change.nonce_delta),
        )
    return table


def print_analysis(
    analysis: BlockAnalysis,
    console: Console | None = None,
    *,
    show_changes: bool = True,
) -> None:
    """Print the block, its transactions and (optionally) its state changes."""
    console = console or Console()

    console.print(block_table(analysis.block))

    if analysis.block.transactions:
        console.print(transactions_table(analysis.block))
    else:
        console.print("[dim]No transactions in this block[/dim]")

    if not show_changes:
        return

    if analysis.changes:
        console.print(changes_table(analysis.changes))
    else:
        console.print("[dim]No state changes[/dim]")


__all__ = [
    "block_table",
    "changes_table",
    "print_analysis",
    "transactions_table",
]
