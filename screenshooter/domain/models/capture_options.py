# screenshooter/domain/models/capture_options.py
"""
Capture preferences owned by the preferences UI.

The region and action behave like radio-button groups: exactly one value of
each holds at any time and they only change through select_region and
select_action, which validate before touching state.
"""
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import ValidationError

NO_APPLICATION = "none"


class CaptureRegion(Enum):
    FULLSCREEN = "fullscreen"
    ACTIVE_WINDOW = "active_window"
    SELECT = "select"


class CaptureAction(Enum):
    SAVE = "save"
    OPEN = "open"
    CLIPBOARD = "clipboard"


def default_screenshot_directory() -> str:
    """~/Pictures when it exists, otherwise the home directory."""
    pictures = Path.home() / "Pictures"
    if pictures.is_dir():
        return str(pictures)
    return str(Path.home())


def is_valid_command(command: str) -> bool:
    """True for the "none" sentinel or a resolvable executable."""
    if not isinstance(command, str) or not command:
        return False
    if command == NO_APPLICATION:
        return True
    if os.path.isabs(command):
        return os.path.isfile(command) and os.access(command, os.X_OK)
    return shutil.which(command) is not None


@dataclass
class CaptureOptions:
    """
    Mutable session state for a capture.

    Attributes:
        region: Screen area to capture
        action: What to do with the captured image
        delay_seconds: Delay before capturing, never negative
        show_save_dialog: Whether saving asks the user for a location
        default_directory: Directory used for generated filenames
        open_with_command: Executable used by the Open action, or "none"
    """
    region: CaptureRegion = CaptureRegion.FULLSCREEN
    action: CaptureAction = CaptureAction.SAVE
    delay_seconds: int = 0
    show_save_dialog: bool = True
    default_directory: str = field(default_factory=default_screenshot_directory)
    open_with_command: str = NO_APPLICATION

    def select_region(self, region: Union[CaptureRegion, str]) -> Result[bool]:
        try:
            self.region = CaptureRegion(region)
        except ValueError as e:
            return Result.fail(ValidationError(
                message=f"Unknown capture region: {region}",
                details={"region": region},
                inner_error=e
            ))
        return Result.ok(True)

    def select_action(self, action: Union[CaptureAction, str]) -> Result[bool]:
        try:
            self.action = CaptureAction(action)
        except ValueError as e:
            return Result.fail(ValidationError(
                message=f"Unknown capture action: {action}",
                details={"action": action},
                inner_error=e
            ))
        return Result.ok(True)

    def set_delay(self, seconds: int) -> Result[bool]:
        try:
            seconds = int(seconds)
        except (ValueError, TypeError):
            return Result.fail(ValidationError("Delay must be an integer", details={"delay": seconds}))
        if seconds < 0:
            return Result.fail(ValidationError("Delay cannot be negative", details={"delay": seconds}))
        self.delay_seconds = seconds
        return Result.ok(True)

    def set_show_save_dialog(self, enabled: bool) -> Result[bool]:
        # "false" would otherwise read as True
        if not isinstance(enabled, bool):
            return Result.fail(ValidationError(
                message="Show-save-dialog must be true or false",
                details={"show_save_dialog": enabled}
            ))
        self.show_save_dialog = enabled
        return Result.ok(True)

    def set_default_directory(self, directory: str) -> Result[bool]:
        if not isinstance(directory, str) or not directory:
            return Result.fail(ValidationError(
                message="Default directory must be a non-empty path",
                details={"screenshot_dir": directory}
            ))
        self.default_directory = os.path.abspath(os.path.expanduser(directory))
        return Result.ok(True)

    def set_open_with_command(self, command: str) -> Result[bool]:
        """Replace the Open-with command. Must be an executable or "none"."""
        if not is_valid_command(command):
            return Result.fail(ValidationError(
                message=f"Not an executable: {command}",
                details={"command": command}
            ))
        self.open_with_command = command
        return Result.ok(True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region.value,
            "action": self.action.value,
            "delay": self.delay_seconds,
            "show_save_dialog": self.show_save_dialog,
            "screenshot_dir": self.default_directory,
            "app": self.open_with_command,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CaptureOptions':
        """
        Build options from persisted settings.

        Values that fail validation are skipped so the defaults stay in place.
        """
        options = cls()
        if "region" in data:
            options.select_region(data["region"])
        if "action" in data:
            options.select_action(data["action"])
        if "delay" in data:
            options.set_delay(data["delay"])
        if "show_save_dialog" in data:
            options.set_show_save_dialog(data["show_save_dialog"])
        if data.get("screenshot_dir"):
            options.set_default_directory(data["screenshot_dir"])
        if "app" in data:
            # Apps uninstalled since the last run fall back to "none"
            options.set_open_with_command(data["app"])
        return options
