# -*- coding: utf-8 -*-
# ccex/core/runtime/logger.py
# Logger helpers: console handler per logger, optional midnight-rotating file.

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ROOT_NAME = 'ccex'


def get_logger(name=None, level=None):
    """
    Return a logger under the 'ccex' namespace.

    The console handler is attached to the 'ccex' root only, once, so child
    loggers never print twice.

    Args:
        name: dotted suffix, e.g. 'drivers.binance'
        level: optional level applied to the returned logger
    """
    root = logging.getLogger(ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    logger = logging.getLogger(ROOT_NAME + '.' + name) if name else root
    if level is not None:
        logger.setLevel(level)
    return logger


def setup_file_logging(log_dir="logs", log_name="ccex", backup_count=30, level=logging.INFO):
    """
    Add a TimedRotatingFileHandler (rotates at midnight) to the 'ccex' root.

    Args:
        log_dir: directory for log files, created if missing
        log_name: file name prefix
        backup_count: number of rotated files to keep

    Returns:
        the handler that was added (or the existing one for the same file)
    """
    log_path = Path(log_dir).resolve()
    log_path.mkdir(parents=True, exist_ok=True)
    filename = str(log_path / ("%s.log" % log_name))

    root = get_logger()
    for handler in root.handlers:
        if isinstance(handler, TimedRotatingFileHandler) and handler.baseFilename == filename:
            return handler

    handler = TimedRotatingFileHandler(
        filename=filename,
        when='midnight',
        interval=1,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    handler.setLevel(level)
    root.addHandler(handler)
    return handler


def configure_logging(options, log_dir=None):
    """
    Apply a `logging:` block from ccex.yaml (level, log_dir, file, backup_count).

    An explicit log_dir wins over the block's; with neither, only the level is set.

    Returns:
        the file handler, or None when no log directory is configured
    """
    options = options or {}
    level = options.get('level', logging.INFO)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    get_logger().setLevel(level)
    log_dir = log_dir or options.get('log_dir')
    if not log_dir:
        return None
    return setup_file_logging(log_dir, options.get('file', ROOT_NAME),
                              backup_count=options.get('backup_count', 30), level=level)


def truncate(text, limit=200):
    """Shorten venue payloads before they reach the log."""
    if text is None:
        return ''
    if isinstance(text, bytes):
        text = text.decode('utf-8', 'replace')
    text = str(text)
    return text if len(text) <= limit else text[:limit] + '...'
