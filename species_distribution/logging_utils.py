"""
Project-wide logging setup.

Usage in the entry script:

    from species_distribution.logging_utils import get_logger
    logger = get_logger(__name__)
    logger.info("Generated %d sites", n)

Library modules just use logging.getLogger(__name__); their records propagate
up to the "species_distribution" logger, which get_logger also configures.
"""

import logging
import sys

_PACKAGE = "species_distribution"


def _attach_handler(logger: logging.Logger, level: int) -> None:
    if logger.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Return a named logger with a consistent format.

    Safe to call multiple times with the same name — handlers are only
    attached once, so there's no risk of duplicate log lines.
    """
    package_logger = logging.getLogger(_PACKAGE)
    _attach_handler(package_logger, level)

    logger = logging.getLogger(name)
    if name != _PACKAGE and not name.startswith(_PACKAGE + "."):
        _attach_handler(logger, level)
    return logger
