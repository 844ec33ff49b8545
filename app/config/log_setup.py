"""Process-wide logging setup for console output."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def config_configure_logging(level: str = "INFO") -> None:
    """Install a single console handler on the root logger.

    Args:
        level: Logging level name applied to the root logger.

    Returns:
        None: Configures logging as a side effect.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level.upper())
