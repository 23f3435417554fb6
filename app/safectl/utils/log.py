"""Logging configuration for the CLI.

Library modules log through ``logging.getLogger(__name__)``; the CLI
routes the ``safectl`` logger to stderr through Rich.
"""

import logging

from rich.logging import RichHandler

from safectl.utils.formatting import err_console

LOGGER_NAME = "safectl"


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Attach a Rich handler to the ``safectl`` logger.

    Args:
        verbose: Log at DEBUG level.
        quiet: Log errors only. Ignored when verbose is set.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
