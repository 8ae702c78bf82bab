"""Logging configuration for the bookmark manager."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure loguru for the CLI.

    Store rejections ("Group name already exists") are logged at INFO, so
    --quiet hides them along with routine save messages.
    """
    logger.remove()
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
