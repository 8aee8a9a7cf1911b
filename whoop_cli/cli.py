"""whoop command-line interface.

Usage:
    whoop auth
    whoop stats [--date YYYY-MM-DD] [--text | --json]

Credentials come from WHOOP_EMAIL and WHOOP_PASSWORD (environment or .env).
"""

import argparse
import asyncio
import logging
import re
import sys
from datetime import date
from typing import Optional, Sequence

from whoop_cli import __version__
from whoop_cli.adapters.whoop_adapter import WhoopAdapter
from whoop_cli.core.config import Settings, get_settings, local_timezone_name, local_tzinfo
from whoop_cli.observability import configure_logging, get_metrics_backend
from whoop_cli.services.daily_stats import build_daily_stats
from whoop_cli.services.formatter import format_daily_stats_json, format_daily_stats_text

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def ensure_date(value: str) -> str:
    """Validate a YYYY-MM-DD calendar date."""
    if not _DATE_PATTERN.match(value):
        raise ValueError(f'Invalid date "{value}". Expected YYYY-MM-DD')
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError(f'Invalid date "{value}". Expected YYYY-MM-DD') from None
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whoop",
        description="Fetch daily WHOOP statistics from the mobile API.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    subparsers.add_parser(
        "auth",
        help="Validate credentials by logging in and printing token expiry",
        description="Log in with WHOOP_EMAIL / WHOOP_PASSWORD and print token expiry.",
    )

    stats = subparsers.add_parser(
        "stats",
        help="Print stats for a day (JSON by default)",
        description="Print stats for a day. --date defaults to local today.",
    )
    stats.add_argument("--date", dest="day", metavar="YYYY-MM-DD", help="Day to report")
    output = stats.add_mutually_exclusive_group()
    output.add_argument(
        "--text", dest="output_format", action="store_const", const="text",
        help="Human-readable output",
    )
    output.add_argument(
        "--json", dest="output_format", action="store_const", const="json",
        help="JSON output (default)",
    )
    stats.set_defaults(output_format="json")
    return parser


async def run_auth(settings: Settings) -> str:
    """Log in once and describe the token lifetime."""
    async with WhoopAdapter.from_settings(settings) as client:
        token = await client.login()
    expires = token.expires_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"Authentication succeeded.\nToken expires: {expires}"


async def run_stats(settings: Settings, day: str, output_format: str) -> str:
    """Build and render statistics for a day."""
    tz = local_tzinfo(settings)
    async with WhoopAdapter.from_settings(settings) as client:
        output = await build_daily_stats(client, day, tz=tz)
    if output_format == "text":
        return format_daily_stats_text(output, local_timezone_name(settings), tz)
    return format_daily_stats_json(output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the ``whoop`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(logging.DEBUG if args.verbose else settings.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "auth":
            result = asyncio.run(run_auth(settings))
        else:
            day = ensure_date(args.day if args.day is not None else date.today().isoformat())
            result = asyncio.run(run_stats(settings, day, args.output_format))
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        logger.debug(f"External API metrics:\n{get_metrics_backend().render_prometheus()}")

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
