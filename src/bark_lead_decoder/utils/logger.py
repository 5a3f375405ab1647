#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging Configuration Module

Sets up the ``bark_lead_decoder`` package logger: a stderr console handler so
decoded JSON on stdout stays clean, plus an optional size-rotated log file.
Records can be written as plain text or JSON.
"""

import os
import sys
import json
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Union

PACKAGE_LOGGER = "bark_lead_decoder"

DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_FILE_PATH = "LOG_FILE_PATH"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Configured loggers, so repeated calls don't stack handlers
_loggers: Dict[str, logging.Logger] = {}


def _resolve_level(level: Optional[Union[int, str]], fallback: int) -> int:
    if level is None:
        return fallback
    if isinstance(level, str):
        return LOG_LEVELS.get(level.upper(), fallback)
    return level


def _env_level() -> Optional[int]:
    raw = os.environ.get(ENV_LOG_LEVEL)
    if not raw:
        return None
    if raw.upper() in LOG_LEVELS:
        return LOG_LEVELS[raw.upper()]
    try:
        return int(raw)
    except ValueError:
        return None


class LoggerConfig:
    """Levels, file path and format for one logger."""

    def __init__(
        self,
        name: str = PACKAGE_LOGGER,
        console_level: Optional[Union[int, str]] = None,
        file_level: Optional[Union[int, str]] = None,
        log_file: Optional[str] = None,
        json_logs: bool = False,
    ):
        """
        Args:
            name: Logger name
            console_level: Console level; LOG_LEVEL or INFO when None
            file_level: File level; LOG_LEVEL or DEBUG when None
            log_file: Log file path; LOG_FILE_PATH when None, no file if unset
            json_logs: Whether to write records as JSON
        """
        self.name = name

        env_level = _env_level()
        self.console_level = _resolve_level(
            console_level, env_level if env_level is not None else DEFAULT_CONSOLE_LEVEL
        )
        self.file_level = _resolve_level(
            file_level, env_level if env_level is not None else DEFAULT_FILE_LEVEL
        )

        self.log_file = log_file or os.environ.get(ENV_LOG_FILE_PATH) or None
        self.json_logs = json_logs


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    FIELDS = {
        "timestamp": "asctime",
        "level": "levelname",
        "name": "name",
        "module": "module",
        "function": "funcName",
        "line": "lineno",
        "message": "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        record.asctime = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        record.message = record.getMessage()

        log_record = {key: getattr(record, attr) for key, attr in self.FIELDS.items()}
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def configure_logger(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """
    Configure a logger with the specified settings.

    Args:
        config: Logger configuration (or None for default)

    Returns:
        Configured logger
    """
    if config is None:
        config = LoggerConfig()

    if config.name in _loggers:
        return _loggers[config.name]

    logger = logging.getLogger(config.name)
    logger.setLevel(min(config.console_level, config.file_level))
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter() if config.json_logs else logging.Formatter(DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(config.console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file:
        os.makedirs(os.path.dirname(os.path.abspath(config.log_file)), exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(config.file_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _loggers[config.name] = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger by name.

    Loggers below the package namespace propagate to the package logger so
    they share its handlers.
    """
    if name in _loggers:
        return _loggers[name]

    if name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)

    return configure_logger(LoggerConfig(name=name))


def configure_logging(
    level: Optional[Union[int, str]] = None,
    log_file: Optional[str] = None,
    json_logs: bool = False,
) -> logging.Logger:
    """(Re)configure the package logger used by the CLI."""
    _loggers.pop(PACKAGE_LOGGER, None)
    return configure_logger(
        LoggerConfig(console_level=level, file_level=level, log_file=log_file, json_logs=json_logs)
    )


def log_processing_event(processor: str, event_type: str, message: str, level: int = logging.INFO) -> None:
    """Log a pipeline event as ``[processor] [event_type] message``."""
    get_logger(PACKAGE_LOGGER + ".processing").log(level, f"[{processor}] [{event_type}] {message}")


def mask_value(value: str) -> str:
    """Mask all but the first and last character of a value."""
    if len(value) > 6:
        return value[0] + "*" * (len(value) - 2) + value[-1]
    return "*" * len(value)


def log_sensitive(logger: logging.Logger, level: int, message: str, **sensitive_data: Optional[str]) -> None:
    """
    Log a message with the given values masked, e.g. phone numbers and emails.

    Args:
        logger: Logger to use
        level: Logging level
        message: Message to log
        sensitive_data: Values to mask wherever they appear in the message
    """
    masked_message = message
    for value in sensitive_data.values():
        if value and isinstance(value, str):
            masked_message = masked_message.replace(value, mask_value(value))

    logger.log(level, masked_message)
