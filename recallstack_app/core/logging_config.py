"""
Logging setup for RecallStack.

One package logger (``recallstack_app``) carries a console handler and a
size-rotated file handler. Module loggers created with
``logging.getLogger(__name__)`` propagate into it.
"""

import json
import logging
import logging.handlers
import os
from typing import Optional

PACKAGE_LOGGER = 'recallstack_app'
LOG_FILE_NAME = 'recallstack.log'

TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; the message is escaped by ``json.dumps``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'time': self.formatTime(record, DATE_FORMAT),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    log_level: str = 'INFO',
    log_dir: Optional[str] = None,
    json_format: bool = False,
    name: str = PACKAGE_LOGGER
) -> logging.Logger:
    """
    Install console and rotating file handlers on the ``name`` logger.

    Calling it again replaces the handlers instead of stacking them.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_dir: Directory for the log file (default: logs/ at the project root)
        json_format: Emit JSON lines instead of plain text
        name: Logger to configure

    Returns:
        The configured logger
    """
    if log_dir is None:
        log_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'logs')
    os.makedirs(log_dir, exist_ok=True)

    level = getattr(logging, str(log_level).upper(), logging.INFO)
    formatter = JsonLineFormatter() if json_format else logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in (console_handler, file_handler):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # request lines from the dev server are noise next to review logs
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    logger.info("Logging initialized: level=%s, dir=%s", logging.getLevelName(level), log_dir)
    return logger
