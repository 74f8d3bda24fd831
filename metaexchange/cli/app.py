"""Typer CLI application for metaexchange."""

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Final, Optional

import typer
from rich.console import Console
from rich.table import Table

from metaexchange.core.domain.exchange import ExchangeSnapshot
from metaexchange.core.domain.execution_plan import OrderSide
from metaexchange.core.domain.order_book import Order
from metaexchange.core.math import to_decimal
from metaexchange.router.best_execution import BestExecutionConfig, BestExecutionResult
from metaexchange.router.candidates import TieBreak
from metaexchange.service import BestExecutionService
from metaexchange.storage.snapshot_store import (
    DEFAULT_EXCHANGES_DIR,
    ExchangeSnapshotStore,
    SnapshotStoreError,
)

EXCHANGES_DIR_ENV_VAR: Final[str] = "METAEXCHANGE_EXCHANGES_DIR"

app = typer.Typer(
    name="metaexchange",
    help="Best-execution planner that splits crypto orders across several exchanges",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _exceeds_limit_message(result: BestExecutionResult) -> str:
    verb = result.side.value.lower()
    return (
        f"The amount you want to {verb} exceeds the available funds of all exchanges.\n"
        f"Requested: {result.requested_amount}\n"
        f"Available: {result.total_available_funds}"
    )


def _print_plan(result: BestExecutionResult) -> None:
    plan = result.plan

    table = Table(title=f"{result.side.value} {result.requested_amount}")
    table.add_column("Exchange", style="cyan")
    table.add_column("Price", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Order Id")

    for fill in plan.fills:
        table.add_row(fill.exchange_id, str(fill.price), str(fill.amount), fill.order_id or "-")

    console.print(f"Best Price: {plan.best_price}")
    console.print(table)
    console.print(f"Filled: {plan.filled_amount} of {result.requested_amount}")

    if not result.fully_filled:
        console.print(
            "Order books ran out before the requested amount was filled.",
            style="yellow",
        )


@app.command()
def execute(
    side: str = typer.Argument(..., help="Order side: Buy or Sell"),
    amount: str = typer.Argument(..., help="Amount of crypto to buy or sell"),
    exchanges_dir: Path = typer.Option(
        Path(DEFAULT_EXCHANGES_DIR),
        "--exchanges-dir", "-d",
        envvar=EXCHANGES_DIR_ENV_VAR,
        help="Directory with exchange snapshot JSON files",
    ),
    tie_break: TieBreak = typer.Option(
        TieBreak.EXCHANGE_ID,
        "--tie-break",
        help="Ordering of orders with equal price",
    ),
    price_quantum: Optional[str] = typer.Option(
        None,
        "--price-quantum",
        help="Round the best price to this step (e.g. 0.01)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Compute the plan without writing exchange files back",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the plan as a JSON document",
    ),
) -> None:
    """Compute the best execution plan and apply it to the exchange snapshots."""
    try:
        order_side = OrderSide.parse(side)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="SIDE")

    try:
        order_amount = to_decimal(amount)
    except ValueError:
        order_amount = Decimal("0")
    if order_amount <= 0:
        console.print("Please enter a valid amount.", style="red")
        raise typer.Exit(code=2)

    quantum = None
    if price_quantum is not None:
        try:
            quantum = to_decimal(price_quantum)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--price-quantum")
        if quantum <= 0:
            raise typer.BadParameter("must be positive", param_hint="--price-quantum")

    service = BestExecutionService(
        ExchangeSnapshotStore(exchanges_dir),
        BestExecutionConfig(tie_break=tie_break, price_quantum=quantum),
    )

    try:
        result = service.execute(order_side, order_amount, persist=not dry_run)
    except SnapshotStoreError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_document(), indent=2))
    elif result.exceeds_limit:
        console.print(_exceeds_limit_message(result), style="red")
    else:
        _print_plan(result)

    if result.exceeds_limit:
        raise typer.Exit(code=1)


def _book_table(orders: list[Order]) -> Table:
    table = Table()
    table.add_column("Price", justify="right")
    table.add_column("Amount", justify="right")
    for order in orders:
        table.add_row(str(order.price), str(order.amount))
    return table


def _print_exchange(exchange: ExchangeSnapshot, depth: Optional[int]) -> None:
    book = exchange.order_book
    funds = exchange.available_funds

    asks = sorted(book.asks, key=lambda o: o.price)
    bids = sorted(book.bids, key=lambda o: o.price)
    if depth is not None:
        # ближайшие к спреду уровни
        asks = asks[:depth]
        bids = bids[-depth:] if depth else []

    console.print(f"Asks - {exchange.exchange_id} (Crypto Available: {funds.crypto})")
    console.print(_book_table(asks))
    console.print(f"Bids - {exchange.exchange_id} (Euro Available: {funds.euro})")
    console.print(_book_table(bids))


@app.command()
def books(
    exchanges_dir: Path = typer.Option(
        Path(DEFAULT_EXCHANGES_DIR),
        "--exchanges-dir", "-d",
        envvar=EXCHANGES_DIR_ENV_VAR,
        help="Directory with exchange snapshot JSON files",
    ),
    depth: Optional[int] = typer.Option(
        None,
        "--depth",
        min=0,
        help="Show only this many price levels nearest to the spread",
    ),
) -> None:
    """Show the order books and available funds of every exchange."""
    try:
        exchanges = ExchangeSnapshotStore(exchanges_dir).load_all()
    except SnapshotStoreError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(code=1)

    if not exchanges:
        console.print("No exchanges found.", style="yellow")
        return

    for exchange in exchanges:
        _print_exchange(exchange, depth)


if __name__ == "__main__":
    app()
