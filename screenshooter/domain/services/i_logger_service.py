#screenshooter/domain/services/i_logger_service.py
"""
Logger service interface.

Every service receives an ILoggerService in its constructor instead of
reaching for a module-level logger, so tests can capture or silence output.
"""
from abc import ABC, abstractmethod


class ILoggerService(ABC):
    """
    Interface for logging services.

    Keyword arguments passed to the level methods are context values that
    implementations append to the message.
    """

    @abstractmethod
    def debug(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def info(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def critical(self, message: str, **kwargs) -> None:
        pass

    @abstractmethod
    def exception(self, message: str, **kwargs) -> None:
        """Log an error message together with the active exception's traceback."""
        pass

    @abstractmethod
    def set_level(self, level: int) -> None:
        """
        Set the minimum log level to display.

        Args:
            level: Minimum log level (e.g., logging.INFO, logging.DEBUG)
        """
        pass
