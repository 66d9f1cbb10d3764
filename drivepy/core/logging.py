"""Logger factory shared by drivepy modules."""

import logging


def get_logger(name: str) -> logging.Logger:
    """Return the drivepy logger called ``name``.

    Records always propagate, so an application's basicConfig() or its own
    handlers receive them without calling setup_logging(). When the root
    logger has no handlers yet the level defaults to WARNING, keeping the
    library quiet in unconfigured programs.

    Args:
        name: Dotted logger name, e.g. 'drivepy.upload.chunk'
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger
