#screenshooter/domain/services/i_ui_service.py

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from PIL import Image

from screenshooter.domain.common.result import Result


class IUIService(ABC):
    """
    Presentation boundary used by the save and upload workflows.

    All methods are called on the UI thread.
    """

    @abstractmethod
    def show_progress_dialog(self, title: str, on_cancel: Optional[Callable[[], None]] = None) -> Any:
        """
        Show a busy indicator.

        Args:
            title: Dialog title
            on_cancel: Called if the user dismisses the dialog

        Returns:
            Opaque handle for update_message and hide
        """
        pass

    @abstractmethod
    def update_message(self, handle: Any, text: str) -> None:
        pass

    @abstractmethod
    def hide(self, handle: Any) -> None:
        pass

    @abstractmethod
    def show_error(self, message: str) -> Result[bool]:
        """Show a blocking error notification."""
        pass

    @abstractmethod
    def show_message(self, title: str, message: str) -> Result[bool]:
        """Show a blocking informational notification."""
        pass

    @abstractmethod
    def prompt_save_location(self, default_dir: str, default_name: str,
                             preview: Optional[Image.Image]) -> Result[Optional[str]]:
        """
        Ask the user where to save a screenshot.

        Args:
            default_dir: Folder the dialog opens in
            default_name: Proposed file name
            preview: Downscaled image shown next to the file list

        Returns:
            Result containing the chosen path, or None if the user cancelled
        """
        pass

    @abstractmethod
    def ask_for_information(self, prompt: str) -> Optional[str]:
        """Ask the user for a line of text. None if cancelled."""
        pass
