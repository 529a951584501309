"""Logging helpers for hilbert_geometry.

All loggers in the package hang off the ``hilbert_geometry`` logger,
which only gets a NullHandler at import time. Call `configure_logging`
to actually see messages.
"""

import logging
import sys

ROOT_LOGGER_NAME = "hilbert_geometry"

_FORMAT = logging.Formatter("%(levelname)s %(name)s: %(message)s")


def get_logger(name=None):
    """Return a logger in the hilbert_geometry hierarchy."""
    if name is None or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = "{}.{}".format(ROOT_LOGGER_NAME, name)

    return logging.getLogger(name)


def configure_logging(level=logging.INFO, stream=None):
    """Attach a stream handler to the package logger and set its level.

    Calling this more than once replaces the previous handler instead
    of stacking duplicates. The process root logger is left alone.

    Parameters
    ----------
    level : int or str
        logging level, e.g. `logging.DEBUG` or `"debug"`
    stream : file-like
        where to write messages. Defaults to stdout.

    Returns
    -------
    logging.Logger
        the configured package logger

    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = get_logger()
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(_FORMAT)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger
