"""Command-line entry point for eth.store calculations.

Usage:
    python -m src.ethstore.cli --days latest
    python -m src.ethstore.cli --days 10-12 --json --execution-url http://localhost:8545
"""

from __future__ import annotations

import json
import sys
from argparse import ArgumentParser
from asyncio import run
from pathlib import Path

from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from src.ethstore.calculator import calculate_days, get_latest_day, parse_day
from src.ethstore.errors import EthStoreError, InvalidArgument
from src.ethstore.formula import format_apr
from src.ethstore.settings import Settings
from src.helpers.config import get_beacon_url
from src.helpers.constants import DEFAULT_DAYS_CONCURRENCY
from src.helpers.progress import advance_callback, create_standard_progress


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from rich.progress import Progress

    from src.ethstore.models import DayResult


def parse_days(spec: str) -> list[int]:
    """Expand a day list such as ``"10"``, ``"10-12"`` or ``"1,4-6"``.

    Ranges are inclusive. Duplicates are dropped, order is ascending.

    Raises:
        InvalidArgument: On a malformed entry or a descending range
    """
    days: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            msg = f"Empty entry in day list {spec!r}"
            raise InvalidArgument(msg)
        if "-" in part:
            first, _, last = part.partition("-")
            start, end = parse_day(first), parse_day(last)
            if end < start:
                msg = f"Descending day range {part!r}"
                raise InvalidArgument(msg)
            days.update(range(start, end + 1))
        else:
            days.add(parse_day(part))
    return sorted(days)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Calculate the eth.store APR of finalized days")
    parser.add_argument(
        "--beacon-url",
        default=None,
        help="Beacon node API URL (default: $BEACON_ENDPOINT or a local node)",
    )
    parser.add_argument(
        "--execution-url",
        default=None,
        help="Execution node JSON-RPC URL for fees (default: $ETH_RPC_URL)",
    )
    parser.add_argument(
        "--days",
        default="latest",
        help='Days to calculate: "latest", "N", "A-B" or a comma list (default: latest)',
    )
    parser.add_argument(
        "--concurrency", type=int, default=None, help="Slot fetches in flight per day"
    )
    parser.add_argument(
        "--days-concurrency",
        type=int,
        default=DEFAULT_DAYS_CONCURRENCY,
        help=f"Days calculated in parallel (default: {DEFAULT_DAYS_CONCURRENCY})",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="Per-request timeout in seconds"
    )
    parser.add_argument(
        "--retries", type=int, default=None, help="Attempts per request"
    )
    parser.add_argument(
        "--no-finality-check",
        action="store_true",
        help="Allow days whose closing epoch is not finalized",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument(
        "--json-file", type=Path, default=None, help="Write results as JSON to a file"
    )
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level")
    return parser


def settings_from_args(args: object) -> Settings:
    """Environment settings overridden by whatever was given on the command line."""
    overrides = {
        "execution_url": getattr(args, "execution_url", None),
        "concurrency": getattr(args, "concurrency", None),
        "request_timeout": getattr(args, "timeout", None),
        "max_retries": getattr(args, "retries", None),
    }
    if getattr(args, "debug", False):
        overrides["log_level"] = "DEBUG"
    if getattr(args, "no_finality_check", False):
        overrides["check_finality"] = False

    base = Settings.from_env()
    return Settings.model_validate(
        base.model_dump() | {k: v for k, v in overrides.items() if v is not None}
    )


def results_table(results: Sequence[DayResult]) -> Table:
    table = Table(title="eth.store")
    table.add_column("Day", justify="right")
    table.add_column("Start", justify="left")
    table.add_column("Validators", justify="right")
    table.add_column("Consensus (Gwei)", justify="right")
    table.add_column("Fees (Wei)", justify="right")
    table.add_column("APR", justify="right")
    for result in results:
        table.add_row(
            str(result.day),
            result.day_start.strftime("%Y-%m-%d %H:%M:%S"),
            f"{result.validator_count:,}",
            f"{result.consensus_rewards_gwei:,}",
            f"{result.tx_fees_sum_wei:,}",
            format_apr(result.apr, 6),
        )
    return table


def results_json(results: Sequence[DayResult]) -> str:
    return json.dumps([result.model_dump(mode="json") for result in results], indent=2)


async def run_cli(args: object, console: Console) -> list[DayResult]:
    """Resolve the requested days and calculate them with a progress display."""
    settings = settings_from_args(args)
    beacon_url = get_beacon_url(getattr(args, "beacon_url", None))
    days_spec = str(getattr(args, "days", "latest")).strip()

    if days_spec == "latest":
        days = [await get_latest_day(beacon_url, settings=settings)]
    else:
        days = parse_days(days_spec)

    progress: Progress = create_standard_progress(console=console)
    callbacks: dict[int, Callable[[int], None]] = {}

    def on_slot(day: int, slot: int) -> None:
        callbacks[day](slot)

    with progress:
        for day in days:
            task_id = progress.add_task(f"Day {day}", total=None)
            callbacks[day] = advance_callback(progress, task_id)
        return await calculate_days(
            beacon_url,
            days,
            settings=settings,
            days_concurrency=getattr(args, "days_concurrency", DEFAULT_DAYS_CONCURRENCY),
            on_slot=on_slot,
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    console = Console(stderr=True)

    try:
        results = run(run_cli(args, console))
    except (EthStoreError, ValidationError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    output = results_json(results)
    if args.json_file is not None:
        args.json_file.write_text(output + "\n")
        console.print(f"[green]Wrote {len(results)} day(s) to {args.json_file}[/green]")
    if args.json:
        print(output)
    elif args.json_file is None:
        Console().print(results_table(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
