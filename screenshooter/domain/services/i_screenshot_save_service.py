# screenshooter/domain/services/i_screenshot_save_service.py

"""
Interfaces for naming and saving captured screenshots.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from PIL import Image

from screenshooter.domain.common.result import Result
from screenshooter.domain.models.capture_options import CaptureOptions


class SaveState(Enum):
    IDLE = "idle"
    PROMPTING_USER = "prompting_user"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


class IFilenameAllocator(ABC):
    """Derives a file name that does not exist yet in a directory."""

    @abstractmethod
    def allocate(self, directory: Optional[str]) -> Result[str]:
        """
        Args:
            directory: Folder to probe

        Returns:
            Result containing the bare file name (not the joined path)
        """
        pass


class IScreenshotSaveService(ABC):
    """Saves a captured image, asking the user for a location when configured to."""

    @property
    @abstractmethod
    def state(self) -> SaveState:
        """State reached by the most recent save."""
        pass

    @abstractmethod
    def save_screenshot(self, image: Image.Image, show_save_dialog: bool,
                        default_directory: Optional[str]) -> Result[str]:
        """
        Returns:
            Result containing the absolute path written
        """
        pass

    @abstractmethod
    def save_with_options(self, image: Image.Image, options: CaptureOptions) -> Result[str]:
        pass
