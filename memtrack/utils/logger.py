"""
Logger setup module for the memtrack host memory monitor.
Provides functions to configure logging based on external settings.
"""
import os
import logging
import logging.handlers
import tempfile
from typing import Dict, Optional

APP_LOGGER_NAME = 'memtrack'
DEFAULT_CONSOLE_LEVEL_NAME = 'INFO'
DEFAULT_FILE_LEVEL_NAME = 'DEBUG'
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_loggers: Dict[str, logging.Logger] = {}


def _get_log_level(level_name: str, default_level: int = logging.INFO) -> int:
    """Maps a level name such as 'DEBUG' to its constant, falling back to ``default_level``."""
    level = logging.getLevelName(str(level_name).upper())
    if isinstance(level, int):
        return level
    logging.getLogger(APP_LOGGER_NAME).warning(
        f"Invalid log level name '{level_name}'. Using {logging.getLevelName(default_level)}.")
    return default_level


def _usable_log_directory(directory_path: str) -> Optional[str]:
    """
    Creates ``directory_path`` if needed and returns it when it can hold log files.

    :return: The directory path, or None with the reason logged at warning level
    :rtype: Optional[str]
    """
    try:
        os.makedirs(directory_path, exist_ok=True)
    except OSError as e:
        logging.getLogger(APP_LOGGER_NAME).warning(f"Cannot create log directory {directory_path}: {e}")
        return None
    if not os.access(directory_path, os.W_OK):
        logging.getLogger(APP_LOGGER_NAME).warning(f"Log directory {directory_path} is not writable")
        return None
    return directory_path


def _resolve_log_file(log_file_path: str) -> Optional[str]:
    """
    Picks the file to log into: the requested one, or the same file name under
    the temp fallback directory when the requested directory is unusable.
    """
    log_dir = os.path.dirname(os.path.abspath(log_file_path))
    file_name = os.path.basename(log_file_path)
    for candidate in (log_dir, os.path.join(tempfile.gettempdir(), "MemTrack", "logs")):
        if _usable_log_directory(candidate):
            return os.path.join(candidate, file_name)
    return None


def setup_logger(
    name: str = APP_LOGGER_NAME,
    log_format: str = DEFAULT_LOG_FORMAT,
    console_level_name: str = DEFAULT_CONSOLE_LEVEL_NAME,
    file_level_name: str = DEFAULT_FILE_LEVEL_NAME,
    log_file_path: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    force: bool = False
) -> logging.Logger:
    """
    Sets up a logger with a console handler and, when ``log_file_path`` is
    given, a rotating file handler.

    Loggers are cached by name. A second call returns the cached logger
    unchanged unless ``force`` is set, which rebuilds its handlers; the CLI
    does this once the configuration file has been read.

    :param log_file_path: Log file; None disables file logging
    :type log_file_path: Optional[str]
    :param force: Rebuild handlers of an already configured logger
    :type force: bool
    :return: The configured logger instance
    :rtype: logging.Logger
    """
    if name in _loggers and not force:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    console_level = _get_log_level(console_level_name, logging.INFO)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    logger.setLevel(console_level)

    if log_file_path:
        file_level = _get_log_level(file_level_name, logging.DEBUG)
        resolved_path = _resolve_log_file(log_file_path)
        file_handler = None
        if resolved_path is None:
            logger.error(f"No writable directory for {log_file_path}. Logging to console only.")
        else:
            try:
                file_handler = logging.handlers.RotatingFileHandler(
                    resolved_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
            except OSError as e:
                logger.error(f"Failed to open log file {resolved_path}: {e}. Logging to console only.")
        if file_handler is not None:
            file_handler.setLevel(file_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
            logger.setLevel(min(console_level, file_level))
            logger.info(f"File logging enabled to: {resolved_path}")

    _loggers[name] = logger
    return logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """
    Get a configured logger instance by name.

    Names below the application logger (``memtrack.*``) return plain child
    loggers that propagate to it, so configuring the application logger once
    governs every module. Any other name is set up on first use with default
    settings.

    :param name: The name of the logger to retrieve
    :type name: str
    :return: The configured logger instance
    :rtype: logging.Logger
    """
    if name.startswith(APP_LOGGER_NAME + '.'):
        if APP_LOGGER_NAME not in _loggers:
            setup_logger(APP_LOGGER_NAME)
        return logging.getLogger(name)

    if name not in _loggers:
        return setup_logger(name)

    return _loggers[name]
