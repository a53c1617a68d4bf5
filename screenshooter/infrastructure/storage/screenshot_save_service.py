# screenshooter/infrastructure/storage/screenshot_save_service.py
"""
Save workflow for captured screenshots.

Either asks the user for a location (with a generated name and a small
preview as defaults) or writes straight into the default directory. Write
failures are shown to the user before the failed Result is returned.
"""
import os
from typing import Optional

from PIL import Image

from screenshooter.domain.services.i_screenshot_save_service import (
    IScreenshotSaveService, IFilenameAllocator, SaveState
)
from screenshooter.domain.services.i_ui_service import IUIService
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.models.capture_options import CaptureOptions
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import SaveError, UserCancelledError, DomainError

PREVIEW_SCALE = 5


def make_preview(image: Image.Image, scale: int = PREVIEW_SCALE) -> Image.Image:
    """Downscale by a fixed linear factor for display. Never smaller than 1x1."""
    width = max(1, image.width // scale)
    height = max(1, image.height // scale)
    return image.resize((width, height), Image.Resampling.BILINEAR)


class ScreenshotSaveService(IScreenshotSaveService):
    """
    Saves screenshots as PNG files.

    The state property reflects the most recent call: PROMPTING_USER while
    the dialog is open, WRITING during encoding, then DONE or FAILED.
    """

    def __init__(self, allocator: IFilenameAllocator, ui_service: IUIService, logger: ILoggerService):
        self.allocator = allocator
        self.ui_service = ui_service
        self.logger = logger
        self._state = SaveState.IDLE

    @property
    def state(self) -> SaveState:
        return self._state

    def save_with_options(self, image: Image.Image, options: CaptureOptions) -> Result[str]:
        return self.save_screenshot(image, options.show_save_dialog, options.default_directory)

    def save_screenshot(self, image: Image.Image, show_save_dialog: bool,
                        default_directory: Optional[str]) -> Result[str]:
        self._state = SaveState.IDLE
        name_result = self.allocator.allocate(default_directory)

        if show_save_dialog:
            path_result = self._prompt_for_path(image, default_directory,
                                                name_result.value if name_result.is_success else "")
        elif name_result.is_success:
            path_result = Result.ok(os.path.join(default_directory, name_result.value))
        else:
            path_result = Result.fail(name_result.error)

        if path_result.is_failure:
            return self._fail(path_result.error)

        return self._write(image, path_result.value)

    def _prompt_for_path(self, image: Image.Image, default_directory: Optional[str],
                         default_name: str) -> Result[str]:
        self._state = SaveState.PROMPTING_USER
        try:
            preview = make_preview(image)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not build save preview: {e}")
            preview = None

        chosen = self.ui_service.prompt_save_location(default_directory or "", default_name, preview)
        if chosen.is_failure:
            return chosen
        if not chosen.value:
            self.logger.info("Save cancelled by user")
            return Result.fail(UserCancelledError())
        return Result.ok(chosen.value)

    def _write(self, image: Image.Image, path: str) -> Result[str]:
        self._state = SaveState.WRITING
        path = os.path.abspath(path)
        try:
            image.save(path, format="PNG")
        except (OSError, ValueError) as e:
            return self._fail(SaveError(
                message=f"Failed to save screenshot to {path}: {e}",
                details={"path": path},
                inner_error=e
            ))

        self._state = SaveState.DONE
        self.logger.info(f"Screenshot saved to {path}")
        return Result.ok(path)

    def _fail(self, error: DomainError) -> Result[str]:
        self._state = SaveState.FAILED
        if error.is_cancellation:
            return Result.fail(error)

        self.logger.error(str(error))
        self.ui_service.show_error(error.message)
        return Result.fail(error)
