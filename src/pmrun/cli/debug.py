"""Debug logging setup for the CLI entry point."""

import logging

DEBUG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"


def configure_debug_logging() -> None:
    """Send pmrun debug logging to stderr."""
    logging.basicConfig(level=logging.DEBUG, format=DEBUG_FORMAT)
    logging.getLogger("pmrun").setLevel(logging.DEBUG)
