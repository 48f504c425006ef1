"""
Centralized logging configuration for LinguaDeck.

Console output plus a rotating log file, with an optional JSON line format
for production deployments.
"""

import logging
import logging.handlers
import os
from typing import Optional

LOGGER_NAME = 'linguadeck_app'


def setup_logging(
    app=None,
    log_level: str = 'INFO',
    log_dir: Optional[str] = None,
    json_format: bool = False
) -> logging.Logger:
    """
    Configure the ``linguadeck_app`` logger hierarchy.

    Args:
        app: Flask application instance (optional)
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for the log file. ``None`` disables file logging.
        json_format: Emit one JSON object per line

    Returns:
        The configured logger
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    if json_format:
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'linguadeck.log'),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if app is not None:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

    logger.info("Logging initialized: level=%s, dir=%s", log_level, log_dir or '<console only>')
    return logger
