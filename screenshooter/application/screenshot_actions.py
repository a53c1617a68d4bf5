# screenshooter/application/screenshot_actions.py
"""
Applies the configured capture action to a captured image.
"""
import subprocess
import tempfile

from PIL import Image

from screenshooter.domain.services.i_screenshot_save_service import IScreenshotSaveService
from screenshooter.domain.services.i_ui_service import IUIService
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.models.capture_options import CaptureAction, CaptureOptions, NO_APPLICATION
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import PlatformError, ValidationError


class ScreenshotActions:
    """Dispatches on CaptureOptions.action: save, open with an application, or clipboard."""

    def __init__(self, save_service: IScreenshotSaveService, ui_service: IUIService, logger: ILoggerService):
        self.save_service = save_service
        self.ui_service = ui_service
        self.logger = logger

    def finalize(self, image: Image.Image, options: CaptureOptions) -> Result[str]:
        """
        Returns:
            Result containing the path of the written file
        """
        self.logger.debug(f"Finalizing screenshot with action {options.action.value}")

        if options.action is CaptureAction.SAVE:
            return self.save_service.save_with_options(image, options)
        if options.action is CaptureAction.OPEN:
            return self.open_with(image, options.open_with_command)

        # Clipboard integration belongs to the presentation layer
        return Result.fail(ValidationError(
            message="Copying to the clipboard is not handled here",
            details={"action": options.action.value}
        ))

    def open_with(self, image: Image.Image, command: str) -> Result[str]:
        """Save into a fresh temporary directory and launch command on the file."""
        if not command or command == NO_APPLICATION:
            error = ValidationError("No application selected to open the screenshot")
            self.ui_service.show_error(error.message)
            return Result.fail(error)

        saved = self.save_service.save_screenshot(image, False, tempfile.mkdtemp(prefix="screenshooter-"))
        if saved.is_failure:
            return saved

        try:
            subprocess.Popen([command, saved.value])
        except OSError as e:
            error = PlatformError(
                message=f"Failed to launch {command}: {e}",
                details={"command": command, "path": saved.value},
                inner_error=e
            )
            self.logger.error(str(error))
            self.ui_service.show_error(error.message)
            return Result.fail(error)

        self.logger.info(f"Opened {saved.value} with {command}")
        return saved
