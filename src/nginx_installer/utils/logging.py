"""Logging utilities."""

import logging
import sys


def setup_logging(level: str = "INFO", prog: str = "install-nginx"):
    """Setup logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Diagnostics go to stderr so stdout stays free for the summary
    logging.basicConfig(
        level=log_level,
        format=f'%(asctime)s - {prog} - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
