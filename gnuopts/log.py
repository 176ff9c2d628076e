"""
gnuopts logging.

The package logs through the stdlib `logging` module under the "gnuopts"
logger. A NullHandler keeps it silent unless the host configures logging, so
the parser's diagnostics are a no-op sink by default.

- get_logger(name): child logger of "gnuopts" (e.g. "gnuopts.strategy").
- enable_logging(level): attach a rich console handler writing to stderr.

Levels used by the library
- DEBUG: token classification and every accumulated value.
- WARNING: every reported fault.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT = "gnuopts"

logging.getLogger(ROOT).addHandler(logging.NullHandler())


def get_logger(name=ROOT, /):
    if name != ROOT and not name.startswith(ROOT + "."):
        name = "%s.%s" % (ROOT, name)
    return logging.getLogger(name)


def enable_logging(level="INFO", /, *, console=None):
    """
    Route gnuopts diagnostics to stderr through rich.

    Calling it again replaces the handler installed by a previous call, so the
    level can be changed at runtime without duplicating output.

    Returns the handler so hosts can tweak its formatting.
    """
    logger = logging.getLogger(ROOT)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=console or Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


__all__ = (
    "get_logger",
    "enable_logging",
)
