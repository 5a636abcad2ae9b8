"""Package logger shared by the parent process and its render workers.

The parent owns the real handlers; workers only ever hold a QueueHandler,
so records from every process end up in one console stream and one file.
"""

import logging
import logging.handlers
import multiprocessing as mp
import os
import time
from typing import Iterable, Optional

_LOGGER_NAME = "mandelcanvas"

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

class UTCFormatter(logging.Formatter):
    """ISO-8601 timestamps in UTC, suffixed with ``Z``."""

    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

def _reset(logger: logging.Logger, level: int, handlers: Iterable[logging.Handler]) -> logging.Logger:
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    for h in handlers:
        h.setLevel(level)
        logger.addHandler(h)
    return logger

def _file_handler(log_file: str, rotate_bytes: int, rotate_count: int) -> logging.Handler:
    parent = os.path.dirname(log_file)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
    )

def configure_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    handlers = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(_file_handler(log_file, rotate_bytes, rotate_count))
    fmt = UTCFormatter()
    for h in handlers:
        h.setFormatter(fmt)
    return _reset(get_logger(), level, handlers)

def create_log_queue() -> mp.Queue:
    return mp.Queue(-1)

def start_queue_listener(queue: mp.Queue, listener_logger: logging.Logger) -> logging.handlers.QueueListener:
    listener = logging.handlers.QueueListener(queue, *listener_logger.handlers, respect_handler_level=True)
    listener.start()
    return listener

def logging_initialiser(queue: Optional[mp.Queue], level: int) -> None:
    """Pool/process initializer: route this worker's records to the parent."""
    # Without a queue, worker records go through the default propagation.
    if queue is not None:
        _reset(get_logger(), level, [logging.handlers.QueueHandler(queue)])

def level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {name!r}")
    return level
