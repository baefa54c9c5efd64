#!/usr/bin/env python3
"""Live round trip against Calendar.app and Reminders.app.

Adds a test event and a test reminder to the configured calendar and list,
then deletes them again. Runs interactive setup first if nothing is
configured. Needs macOS with automation access granted.

Usage:
    python scripts/live_round_trip.py [--init-only]

Examples:
    python scripts/live_round_trip.py              # Add and remove test items
    python scripts/live_round_trip.py --init-only  # Load and validate config, then exit
"""

import sys
from pathlib import Path

# Add src to path so we can import from calendar_bridge
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from calendar_bridge.cli import app


def main():
    """Run the live round trip."""
    args = ["self-test"]
    if len(sys.argv) > 1:
        if sys.argv[1] != "--init-only":
            print(f"Unknown argument: {sys.argv[1]}")
            print(__doc__)
            sys.exit(1)
        args.append("--init-only")

    app(args)


if __name__ == "__main__":
    main()
