#screenshooter/infrastructure/logging/logger_service.py
"""
Implementation of the logger service using Python's built-in logging module.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Union

from screenshooter.domain.services.i_logger_service import ILoggerService

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def parse_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Accept a logging constant or a level name such as "debug"."""
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level:
        value = logging.getLevelName(level.upper())
        if isinstance(value, int):
            return value
    return default


class ConsoleLoggerService(ILoggerService):
    """
    Logger service that writes to stdout.

    Context keyword arguments are appended to the message as "[key=value ...]".
    """

    def __init__(self, level: int = logging.INFO, name: str = "Screenshooter"):
        """
        Initialize the logger service.

        Args:
            level: Initial log level (default: INFO)
            name: Logger name
        """
        self.logger = logging.getLogger(name)
        self.set_level(level)

        # Don't add handlers if they already exist
        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(console_handler)

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(self._with_context(message, kwargs))

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(self._with_context(message, kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(self._with_context(message, kwargs))

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(self._with_context(message, kwargs))

    def critical(self, message: str, **kwargs) -> None:
        self.logger.critical(self._with_context(message, kwargs))

    def exception(self, message: str, **kwargs) -> None:
        self.logger.exception(self._with_context(message, kwargs))

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def _with_context(self, message: str, extra: Dict[str, Any]) -> str:
        extra_text = self._format_extra(extra)
        if extra_text:
            return f"{message} {extra_text}"
        return message

    def _format_extra(self, extra: Dict[str, Any]) -> str:
        if not extra:
            return ""
        formatted = [f"{key}={value}" for key, value in extra.items()]
        return f"[{' '.join(formatted)}]"


class FileLoggerService(ConsoleLoggerService):
    """
    Extension of ConsoleLoggerService that also logs to a rotating file.
    """

    def __init__(self, level: int = logging.INFO, name: str = "Screenshooter",
                 log_dir: str = "logs"):
        """
        Initialize the file logger service.

        Args:
            level: Initial log level (default: INFO)
            name: Logger name
            log_dir: Directory to store log files
        """
        super().__init__(level, name)

        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{name.lower()}.log")

        # Re-initialising with the same directory must not duplicate lines
        for handler in self.logger.handlers:
            if isinstance(handler, RotatingFileHandler) and handler.baseFilename == os.path.abspath(log_file):
                return

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.logger.addHandler(file_handler)
