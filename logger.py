# logger.py - PicViewer Logging Configuration
"""
Logging setup for PicViewer. Every module logs to a child of the
"picviewer" logger; console lines show the short module name, the
optional rotating log file keeps the full record.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "picviewer"

CONSOLE_FORMAT = '%(asctime)s %(levelname)-7s [%(module_name)s] %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are too chatty at DEBUG
QUIET_LOGGERS = ["PIL", "asyncio"]


class ModuleNameFilter(logging.Filter):
    """Adds module_name: the logger name without the picviewer prefix"""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(LOGGER_NAME + "."):
            name = name[len(LOGGER_NAME) + 1:]
        record.module_name = name
        return True


def _parse_level(log_level: str) -> int:
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def setup_logger(log_level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the picviewer logger tree; safe to call again to reconfigure"""
    level = _parse_level(log_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.addFilter(ModuleNameFilter())
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)

            # 10MB per file, 5 rotations
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            logger.addHandler(file_handler)

            logger.info(f"File logging enabled: {log_file}")

        except OSError as e:
            logger.error(f"Failed to setup file logging: {e}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging initialized - Level: {logging.getLevelName(level)}")
    return logger
