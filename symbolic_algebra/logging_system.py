"""
Logging System for the Symbolic Algebra Engine

This module provides a centralized logger with verbosity levels so that the
simplifier and solver can trace their rewriting steps without cluttering the
host application's output.
"""

import logging
import sys
from typing import Optional
from enum import Enum
from datetime import datetime

from .config import get_config


class LogLevel(Enum):
    """Enumeration of logging levels for the engine"""
    SILENT = 0      # No output
    MINIMAL = 1     # Warnings only (e.g. fixed-point guard hits)
    MODERATE = 2    # Solve results
    DETAILED = 3    # Each isolation step of the solver
    VERBOSE = 4     # Every simplifier iteration


class AlgebraLogger:
    """
    Centralized logger for the engine with level-aware formatting
    """

    def __init__(self, log_level: LogLevel = LogLevel.MINIMAL,
                 log_to_file: bool = False, log_file_path: Optional[str] = None):
        self.log_level = log_level
        self.log_to_file = log_to_file

        self.logger = logging.getLogger('symbolic_algebra')
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()  # Remove any existing handlers
        self.logger.propagate = False

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        if self.log_level != LogLevel.SILENT:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_to_file:
            if log_file_path is None:
                log_file_path = f"symbolic_algebra_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            file_handler = logging.FileHandler(log_file_path)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.log_level.value >= required_level.value

    def info(self, message: str, required_level: LogLevel = LogLevel.MODERATE):
        if self._should_log(required_level):
            self.logger.info(message)

    def warning(self, message: str):
        if self._should_log(LogLevel.MINIMAL):
            self.logger.warning(message)

    def step(self, message: str):
        """Solver isolation steps"""
        if self._should_log(LogLevel.DETAILED):
            self.logger.info(f"STEP: {message}")

    def debug(self, message: str):
        """Debug information - only in verbose mode"""
        if self._should_log(LogLevel.VERBOSE):
            self.logger.debug(f"DEBUG: {message}")


# Global logger instance
_global_logger: Optional[AlgebraLogger] = None


def _level_from_name(name: str) -> LogLevel:
    try:
        return LogLevel[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {name}") from None


def get_logger() -> AlgebraLogger:
    """Get or create the global logger instance from the engine configuration"""
    global _global_logger
    if _global_logger is None:
        config = get_config()
        _global_logger = AlgebraLogger(
            log_level=_level_from_name(config.log_level),
            log_to_file=config.log_to_file,
            log_file_path=config.log_file_path
        )
    return _global_logger


def set_log_level(level: LogLevel):
    """Set the global logging level"""
    global _global_logger
    if _global_logger is None:
        _global_logger = AlgebraLogger(log_level=level)
    else:
        _global_logger.log_level = level


def configure_logging(log_level: LogLevel = LogLevel.MINIMAL,
                      log_to_file: bool = False,
                      log_file_path: Optional[str] = None) -> AlgebraLogger:
    """Configure the global logging system"""
    global _global_logger
    _global_logger = AlgebraLogger(
        log_level=log_level,
        log_to_file=log_to_file,
        log_file_path=log_file_path
    )
    return _global_logger


def log_info(message: str, level: LogLevel = LogLevel.MODERATE):
    get_logger().info(message, level)


def log_warning(message: str):
    get_logger().warning(message)


def log_step(message: str):
    get_logger().step(message)


def log_debug(message: str):
    get_logger().debug(message)
