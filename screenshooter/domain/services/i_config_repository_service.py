# screenshooter/domain/services/i_config_repository_service.py
"""
Configuration repository interface for application settings.

Defines the contract for storing and retrieving preferences.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, Callable

from screenshooter.domain.common.result import Result
from screenshooter.domain.models.capture_options import CaptureOptions


@dataclass(frozen=True)
class UploadSettings:
    """Where and how screenshots are uploaded."""
    upload_url: str
    timeout_seconds: float
    gateway_url: str


class IConfigRepository(ABC):
    """
    Interface for configuration repository.

    Defines methods for loading, saving, and accessing configuration settings.
    """

    @abstractmethod
    def load_config(self, force_reload: bool = False) -> Result[Dict[str, Any]]:
        """
        Load configuration from storage.

        Args:
            force_reload: Whether to force a reload from storage

        Returns:
            Result containing the configuration dictionary
        """
        pass

    @abstractmethod
    def save_config(self, config: Dict[str, Any]) -> Result[bool]:
        """
        Save configuration to storage.

        Args:
            config: Configuration dictionary

        Returns:
            Result indicating success or failure
        """
        pass

    @abstractmethod
    def get_global_setting(self, key: str, default: Any = None) -> Any:
        """
        Get a global application setting.

        Args:
            key: Setting key
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        pass

    @abstractmethod
    def set_global_setting(self, key: str, value: Any) -> Result[bool]:
        """
        Set a global application setting.

        Args:
            key: Setting key
            value: Setting value

        Returns:
            Result indicating success or failure
        """
        pass

    @abstractmethod
    def load_capture_options(self) -> Result[CaptureOptions]:
        """Build CaptureOptions from the stored preferences."""
        pass

    @abstractmethod
    def save_capture_options(self, options: CaptureOptions) -> Result[bool]:
        """Persist CaptureOptions, leaving other settings untouched."""
        pass

    @abstractmethod
    def get_upload_settings(self) -> UploadSettings:
        """Upload endpoint, timeout and gateway prefix, with defaults applied."""
        pass

    @abstractmethod
    def register_observer(self, callback: Callable[[], None]) -> None:
        """
        Register a callback function to be notified of config changes.

        Args:
            callback: Function to call when config changes
        """
        pass

    @abstractmethod
    def unregister_observer(self, callback: Callable[[], None]) -> None:
        pass
