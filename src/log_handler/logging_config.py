# src/log_handler/logging_config.py
import logging
import queue
import os
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from typing import Dict, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Client libraries log every HTTP round trip at INFO/DEBUG
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "kubernetes")

_log_listener: Optional[QueueListener] = None


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    module_levels: Optional[Dict[str, Union[int, str]]] = None,
) -> QueueListener:
    """
    Configure process-wide logging once.

    Records go through a QueueHandler so the poll loop never blocks on
    console or file I/O; a QueueListener drains them to the real handlers.

    Args:
        log_level: Root level, as a logging constant or a name such as "DEBUG"
        log_file: Optional path of a rotating log file
        module_levels: Per-logger overrides, e.g. {"src.autoscaler": "DEBUG"}

    Returns:
        The running QueueListener
    """
    global _log_listener

    if _log_listener is not None:
        return _log_listener

    if isinstance(log_level, str):
        log_level = log_level.upper()

    if log_file and os.path.dirname(log_file):
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_file:
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    log_queue = queue.Queue()
    listener = QueueListener(log_queue, *handlers, respect_handler_level=True)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.addHandler(QueueHandler(log_queue))
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for module_name, level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(level)

    listener.start()
    _log_listener = listener
    return listener


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flush queued records and stop the listener."""
    global _log_listener

    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None
