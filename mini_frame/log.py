# mini_frame/log.py
"""Console logging switch for the mini_frame package logger."""

import logging


_FORMATTER = logging.Formatter(
    fmt=(
        "%(asctime)s [%(levelname)s] %(name)s.%(funcName)s():%(lineno)d "
        "- %(message)s"
    ),
    datefmt="%H:%M:%S",
)


def enable_debug_logging(level: int = logging.DEBUG) -> logging.Logger:
    """
    Attach a console handler to the ``mini_frame`` logger.

    The package only installs a NullHandler on import, so nothing is printed
    until this is called. Calling it twice does not duplicate the handler.
    """
    logger = logging.getLogger("mini_frame")
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(_FORMATTER)
        logger.addHandler(sh)
    logger.setLevel(level)
    return logger
