"""Run a BullX top-trader scrape against an already running Chrome.

Start Chrome with remote debugging first, e.g.:
    google-chrome --remote-debugging-port=9222
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path for script execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Load .env before importing the package so the global config picks it up
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / ".env")

from rich.console import Console
from rich.table import Table

from wallet_scout.config import Config, config
from wallet_scout.scrapers.base import BrowserConnectError, ScrapeResult
from wallet_scout.scrapers.bullx import BullxScraper
from wallet_scout.state import RunLockError, StateStore, exclusive_run_lock

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# Main Scrape Function
# =============================================================================

async def run_scrape(run_config: Config, store: StateStore) -> ScrapeResult:
    """Run the BullX scraper with the given configuration.

    Raises:
        BrowserConnectError: If Chrome isn't reachable.
    """
    filters = run_config.filters

    console.print("\n[bold blue]Starting BullX scrape[/bold blue]")
    console.print(f"  Browser: {run_config.cdp_url}")
    console.print(f"  Site: {run_config.base_url}")
    console.print(f"  Min PnL: ${filters.min_pnl:,.0f}")
    console.print(f"  Min ROI: {filters.min_roi:,.0f}%")
    console.print(f"  Max tokens: {run_config.max_tokens}")
    console.print(f"  Trader rows: {run_config.start_row} to {run_config.max_traders}")
    console.print(f"  Data dir: {run_config.data_dir}")
    console.print()

    scraper = BullxScraper(app_config=run_config, store=store)
    result = await scraper.run()

    console.print(
        f"[green]Scrape complete:[/green] {len(result.tokens_processed)} tokens, "
        f"{result.rows_evaluated} wallets evaluated, {result.success_count} accepted"
    )

    if result.rejections:
        console.print("\n[bold]Rejections by gate:[/bold]")
        for gate, count in result.rejections.most_common():
            console.print(f"  {gate}: {count}")

    # Report scraping errors if any
    if result.errors:
        console.print(f"\n[bold red]Scrape errors ({result.error_count}):[/bold red]")
        for err in result.errors:
            console.print(f"  [red]✗[/red] {err.location}")
            console.print(f"    {err.error_type}: {err.error_message}")

    return result


# =============================================================================
# Portfolio Summary
# =============================================================================

def _pnl_sort_key(pnl: str) -> float:
    try:
        return float(pnl)
    except ValueError:
        return 0.0


def show_summary(store: StateStore) -> None:
    """Show what's currently saved in portfolios.json."""
    portfolios = store.load_portfolios()
    stats = store.load_stats()

    console.print(f"\n[bold]Portfolios checked so far:[/bold] {stats.evaluated_count}")

    if not portfolios:
        console.print("[dim]No portfolios saved yet.[/dim]")
        return

    table = Table(title=f"Saved Portfolios ({len(portfolios)})")
    table.add_column("Portfolio", style="cyan")
    table.add_column("PnL", justify="right")
    table.add_column("ROI", justify="right")
    table.add_column("Found", style="dim")

    records = sorted(portfolios.values(), key=lambda r: _pnl_sort_key(r.pnl), reverse=True)
    for record in records:
        table.add_row(
            record.link,
            f"${_pnl_sort_key(record.pnl):,.0f}",
            record.roi,
            record.discovered_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


# =============================================================================
# CLI Entry Point
# =============================================================================

def build_config(args: argparse.Namespace) -> Config:
    """Apply CLI overrides on top of the environment config."""
    filters = config.filters.with_overrides(min_pnl=args.min_pnl, min_roi=args.min_roi)
    return config.with_overrides(
        filters=filters,
        max_tokens=args.max_tokens,
        max_traders=args.max_traders,
        start_row=args.start_row,
        host_ip=args.host,
        debug_port=args.port,
        base_url=args.base_url.rstrip("/") if args.base_url else None,
        max_scroll_attempts=args.scroll_attempts,
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Find high-ROI trader wallets on BullX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                # Use settings from .env
  %(prog)s --max-tokens 3 --min-roi 500   # Short run with a lower ROI bar
  %(prog)s --host 192.168.1.20            # Chrome on another machine
  %(prog)s --clear-processed              # Forget processed tokens, then exit
  %(prog)s --summary-only                 # Just show saved portfolios
""",
    )
    parser.add_argument("--min-pnl", type=float, default=None, help="Minimum realized PnL in dollars")
    parser.add_argument("--min-roi", type=float, default=None, help="Minimum ROI in percent")
    parser.add_argument("--max-tokens", type=int, default=None, help="Maximum tokens to process")
    parser.add_argument("--max-traders", type=int, default=None, help="Last trader row to inspect per token")
    parser.add_argument("--start-row", type=int, default=None, help="First trader row to inspect")
    parser.add_argument("--host", default=None, help="Host running Chrome with remote debugging")
    parser.add_argument("--port", type=int, default=None, help="Chrome remote debugging port")
    parser.add_argument("--base-url", default=None, help="BullX base URL")
    parser.add_argument(
        "--scroll-attempts",
        type=int,
        default=None,
        help="Scroll steps before a trader row counts as missing",
    )
    parser.add_argument(
        "--summary-only",
        action="store_true",
        help="Just show saved portfolios, don't scrape",
    )
    parser.add_argument(
        "--clear-portfolios",
        action="store_true",
        help="Delete all saved portfolios and exit",
    )
    parser.add_argument(
        "--clear-processed",
        action="store_true",
        help="Forget all processed tokens and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("wallet_scout").setLevel(logging.DEBUG)

    run_config = build_config(args)
    run_config.ensure_dirs()
    store = StateStore.from_config(run_config)

    if args.summary_only:
        show_summary(store)
        return 0

    try:
        with exclusive_run_lock(run_config.lock_path):
            if args.clear_portfolios or args.clear_processed:
                if args.clear_portfolios:
                    cleared = store.clear_portfolios()
                    console.print(f"[yellow]Cleared {cleared} portfolios[/yellow]")
                if args.clear_processed:
                    cleared = store.clear_processed_tokens()
                    console.print(f"[yellow]Cleared {cleared} processed tokens[/yellow]")
                return 0

            store.init_documents()
            result = asyncio.run(run_scrape(run_config, store))
    except RunLockError as e:
        console.print(f"[bold red]{e}[/bold red]")
        return 1
    except BrowserConnectError as e:
        console.print(f"[bold red]{e}[/bold red]")
        console.print("[dim]Is Chrome running with --remote-debugging-port?[/dim]")
        return 1

    # Show final summary
    console.print("\n" + "=" * 50)
    console.print("[bold]Final Statistics:[/bold]")
    console.print(f"  Tokens processed: {len(result.tokens_processed)}")
    console.print(f"  Wallets checked:  {result.rows_evaluated}")
    console.print(f"  Accepted:         {result.success_count}")
    console.print(f"  Rejected:         {result.rejected_count}")
    console.print(f"  Errors:           {result.error_count}")

    show_summary(store)
    return 0


if __name__ == "__main__":
    sys.exit(main())
