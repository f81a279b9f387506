"""Command-line interface for Haulage."""

import argparse
import logging
import sys

from haulage import __version__
from haulage.corpora.outpost import create_colony, print_state_summary
from haulage.engine import tick_colony
from haulage.logging_config import configure_logging


def main(args: list[str] | None = None) -> int:
    """Run the demo colony headlessly.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        prog="haulage",
        description="Haulage - tick-driven hauler logistics",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=500,
        help="Number of ticks to simulate (default: 500)",
    )
    parser.add_argument(
        "--summary-interval",
        type=int,
        default=100,
        help="Print a summary every N ticks (default: 100)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Log level (default: HAULAGE_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default=None,
        help="Log format (default: HAULAGE_LOG_FORMAT or text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_args(args)
    if parsed.ticks < 0:
        parser.error("--ticks must be non-negative")
    if parsed.summary_interval <= 0:
        parser.error("--summary-interval must be positive")

    level = getattr(logging, parsed.log_level) if parsed.log_level else None
    configure_logging(level=level, format_type=parsed.log_format)

    colony, executor = create_colony()
    print(f"Simulating colony {colony.name} for {parsed.ticks} ticks")
    print_state_summary(colony)
    for _ in range(parsed.ticks):
        report = tick_colony(colony, executor)
        if colony.snapshot.tick % parsed.summary_interval == 0:
            print_state_summary(colony, report)

    print(f"Done at tick {colony.snapshot.tick}, {executor.completed_steps} task steps completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
