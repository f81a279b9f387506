"""Console runner for the Outpost colony.

Usage:
    python -m haulage.corpora.outpost
    python -m haulage.corpora.outpost --ticks 500
"""

from __future__ import annotations

import argparse
import sys

from haulage.corpora.outpost import create_colony, print_state_summary
from haulage.engine import tick_colony
from haulage.logging_config import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the Outpost colony headlessly.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=1000,
        help="Number of simulation ticks to run",
    )
    parser.add_argument(
        "--summary-interval",
        type=int,
        default=100,
        help="Print state summary every N ticks",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the outpost simulation."""
    args = parse_args(argv)

    # Configure logging before any other operations
    configure_logging()

    print(f"Starting Outpost simulation for {args.ticks} ticks...")
    print("=" * 70)

    colony, executor = create_colony()
    print_state_summary(colony)

    report = None
    for _ in range(args.ticks):
        report = tick_colony(colony, executor)
        if colony.snapshot.tick % args.summary_interval == 0:
            print_state_summary(colony, report)

    print("=" * 70)
    print(f"Simulation complete. Final tick: {colony.snapshot.tick}")
    print(f"Task steps completed: {executor.completed_steps}")

    # Print final statistics
    transport = colony.transport_report()
    print(f"Carry parts: {transport.current:.1f} on hand, {transport.needed:.1f} needed")

    return 0


if __name__ == "__main__":
    sys.exit(main())
