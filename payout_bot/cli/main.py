"""
CLI interface for the payout bot.

Operator commands for seeding the ledger, inspecting the event source and
running a payout check outside the serverless platform.
"""

import sys
from datetime import datetime, timezone
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from payout_bot.clients.subgraph import SubgraphClient
from payout_bot.config.loader import DEFAULT_SUBGRAPH_URL, load_settings
from payout_bot.core.conversion import PRICING, estimate_minutes, round_minutes
from payout_bot.core.errors import PayoutBotError
from payout_bot.core.handler import Outcome, build_handler
from payout_bot.core.logging import setup_logging
from payout_bot.storage.repository import PayoutLedger

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_FAIL = 1

DB_PATH_OPTION = typer.Option(
    "payout_bot.db",
    "--db-path",
    "-d",
    envvar="PAYOUT_BOT_DB_PATH",
    help="Path to the payout ledger database"
)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Livepeer payout bot CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Payout Bot - Use --help to see available commands")


@app.command()
def init(
    timestamp: Optional[int] = typer.Option(
        None,
        "--timestamp",
        "-t",
        help="Seed timestamp (defaults to now, so only future payouts are announced)"
    ),
    db_path: str = DB_PATH_OPTION
):
    """Create the ledger and seed the last announced timestamp."""
    seed = timestamp if timestamp is not None else int(datetime.now(timezone.utc).timestamp())
    ledger = PayoutLedger(db_path)
    try:
        ledger.seed(seed)
        console.print(f"[green]✓[/] Ledger initialized at {seed} ({_format_time(seed)})")
        sys.exit(EXIT_CODE_OK)
    except PayoutBotError as e:
        console.print(f"[red]Error initializing ledger:[/] {e.message}")
        sys.exit(EXIT_CODE_FAIL)
    finally:
        ledger.close()


@app.command()
def status(db_path: str = DB_PATH_OPTION):
    """Show the timestamp of the last announced payout."""
    ledger = PayoutLedger(db_path)
    try:
        last = ledger.get_last_timestamp()
        console.print(f"Last announced payout: {last} ({_format_time(last)})")
        sys.exit(EXIT_CODE_OK)
    except PayoutBotError as e:
        console.print(f"[red]Error:[/] {e.message}")
        sys.exit(EXIT_CODE_FAIL)
    finally:
        ledger.close()


@app.command()
def latest(
    subgraph_url: str = typer.Option(
        DEFAULT_SUBGRAPH_URL,
        "--subgraph-url",
        envvar="SUBGRAPH_URL",
        help="GraphQL endpoint of the Livepeer subgraph"
    )
):
    """Fetch and display the newest redemption event."""
    try:
        event = SubgraphClient(subgraph_url).fetch_latest_redemption()
    except PayoutBotError as e:
        console.print(f"[red]Error:[/] {e.message}")
        sys.exit(EXIT_CODE_FAIL)

    minutes = estimate_minutes(
        event.face_value_eth,
        event.face_value_dollars,
        PRICING.price_per_pixel,
        PRICING.pixels_per_minute
    )

    table = Table(title="Latest Redemption")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Time", _format_time(event.timestamp))
    table.add_row("Recipient", event.recipient)
    table.add_row("Face value", f"{event.face_value_eth:.4f} ETH")
    table.add_row("Face value (USD)", f"${event.face_value_dollars:,.2f}")
    table.add_row("Estimated minutes", f"{round_minutes(minutes):,}")
    table.add_row("Transaction", event.transaction)
    console.print(table)
    sys.exit(EXIT_CODE_OK)


@app.command()
def estimate(
    face_value: float = typer.Argument(..., help="Ticket face value in ETH"),
    face_value_usd: float = typer.Argument(..., help="Ticket face value in USD")
):
    """Estimate transcoded minutes for a ticket value."""
    minutes = estimate_minutes(
        face_value,
        face_value_usd,
        PRICING.price_per_pixel,
        PRICING.pixels_per_minute
    )
    console.print(f"Approximately {round_minutes(minutes):,} minutes of video")


@app.command()
def run(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML config file; environment variables override it"
    )
):
    """Run one payout check and announce a new payout if there is one."""
    try:
        settings = load_settings(config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Configuration error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    setup_logging(settings.log_level, settings.log_format)
    handler = build_handler(settings)
    try:
        handler.ledger.verify_writable()
        outcome = handler.check_for_payout()
    except PayoutBotError as e:
        console.print(f"[red]Error ({e.code}):[/] {e.message}")
        sys.exit(EXIT_CODE_FAIL)
    finally:
        handler.ledger.close()

    if outcome == Outcome.ANNOUNCED:
        console.print("[green]✓[/] New payout announced")
    else:
        console.print("No new payout")
    sys.exit(EXIT_CODE_OK)


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


if __name__ == "__main__":
    app()
