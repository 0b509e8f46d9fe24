"""Logging setup for the dropapi CLI."""

import logging

from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Attach a rich console handler to the ``dropapi`` logger.

    Library modules only create loggers; handlers are installed here, by
    the CLI. Calling it again replaces the previous handler.

    Args:
        verbose: Log requests and responses at DEBUG instead of WARNING

    Returns:
        The configured ``dropapi`` logger
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("dropapi")

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        level=level,
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
