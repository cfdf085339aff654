"""Logger module.

Loggers are cached by name. The level and stream given to set_log_level and
set_log_handler apply to every cached logger and become the defaults for
loggers created afterwards.
"""

import logging
import sys
from typing import TextIO

import colorlog

loggers: dict[str, logging.Logger] = {}
defaults: dict[str, str] = {"log_handler": "stdout", "log_level": "INFO"}


def get_logger(
    name: str,
    log_handler: str | None = None,
    log_level: str | None = None,
    log_color: bool = False,
) -> logging.Logger:
    """Get logger.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout' or 'stderr'). Defaults to
            the stream last passed to set_log_handler.
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR',
            'CRITICAL'). Defaults to the level last passed to set_log_level.
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    stream = _parse_handler(log_handler or defaults["log_handler"])
    level = _parse_level(log_level or defaults["log_level"])

    if not log_color:
        logger = logging.getLogger(name)
        handler = logging.StreamHandler(stream)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        logger = colorlog.getLogger(name)
        handler = colorlog.StreamHandler(stream)
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s %(asctime)s - %(name)s - %(levelname)s - %(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )

    logger.setLevel(level)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    loggers[name] = logger
    return logger


def set_log_level(log_level: str) -> None:
    """Apply a log level to every logger created through get_logger.

    Loggers are created at import time, so the CLI calls this once its
    --log-level option is known.

    Args:
        log_level: The logging level name.

    Raises:
        ValueError: If the level name is unknown.
    """
    level = _parse_level(log_level)
    defaults["log_level"] = log_level
    for logger in loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def set_log_handler(log_handler: str) -> None:
    """Point every logger created through get_logger at another stream.

    Used to keep stdout free for machine-readable output.

    Args:
        log_handler: The log handler type ('stdout' or 'stderr').

    Raises:
        ValueError: If the handler type is unknown.
    """
    stream = _parse_handler(log_handler)
    defaults["log_handler"] = log_handler
    for logger in loggers.values():
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(stream)


def _parse_handler(log_handler: str) -> TextIO:
    if log_handler == "stdout":
        return sys.stdout
    if log_handler == "stderr":
        return sys.stderr
    err_msg = f"Invalid handler: {log_handler}"
    raise ValueError(err_msg)


def _parse_level(log_level: str) -> int:
    log_levels = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if log_level not in log_levels:
        err_msg = f"Invalid log level: {log_level}"
        raise ValueError(err_msg)

    return log_levels[log_level]
