import logging
import os
import sys


def setup_logging(
    level: str | int | None = None,
    format: str = "%(asctime)s %(name)s %(funcName)s %(levelname)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
) -> logging.Logger:
    """Configure the ``edit_core`` logger for a host application.

    The library itself only creates module loggers; the GUI (or a script)
    calls this once at start-up.

    Args:
        level: Logging level name or number. ``LOG_LEVEL`` in the environment
               wins when set; defaults to WARNING.
        format: Log message format.
        datefmt: Date format for timestamps.

    Returns:
        The configured package logger.
    """
    env_level = os.environ.get("LOG_LEVEL")
    if env_level:
        level = env_level
    if level is None:
        level = logging.WARNING

    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f"Invalid log level: {level}")
        level = numeric_level

    logger = logging.getLogger("edit_core")

    # Drop handlers from an earlier call to avoid duplicate lines
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=format, datefmt=datefmt))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
