"""
Scheduling engine entry point.

The engine is a library; this script only drives the offline walkthrough
so the package can be exercised without a backend.

Usage:
    python main.py                     # all scenarios
    python main.py --scenario travel   # one scenario
"""

import logging
import sys

from lensbook.config import settings

logger = logging.getLogger(__name__)


def run(argv=None) -> dict:
    """Run the console walkthrough with the given command-line arguments."""
    from console_demo import main as run_walkthrough

    logger.info("Starting %s walkthrough", settings.app_name)
    return run_walkthrough(argv)


if __name__ == "__main__":
    run(sys.argv[1:])
