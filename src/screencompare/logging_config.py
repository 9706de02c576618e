"""
Logging Configuration
Sets up the package logger for the application and the test suite.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER: str = "screencompare"
LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT: str = '%H:%M:%S'

# Libraries that log at INFO on every render-window setup
_NOISY_LIBRARIES: tuple[str, ...] = ("pyvista", "pyvistaqt")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the 'screencompare' namespace logger.

    Calling it again replaces the previous handlers, so switching to
    --debug or a log file at runtime never duplicates output.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file (overwritten).
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug(f"Logging initialized at {logging.getLevelName(level)}"
                 + (f", writing to {log_file}" if log_file else ""))
    return logger
