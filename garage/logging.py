"""Logging configuration for the garage tools."""

import logging
from typing import Union


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure the 'garage' logger with a single stream handler.

    Module loggers (garage.vehicle, garage.fleet, ...) propagate to it.
    Repeated calls only adjust the level.
    """
    logger = logging.getLogger("garage")
    logger.setLevel(level)

    # Avoid duplicate handlers on repeated calls
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)

    logger.debug("Logging initialized")
