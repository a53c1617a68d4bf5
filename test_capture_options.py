import os
import sys

import pytest

from screenshooter.domain.common.errors import ErrorCategory
from screenshooter.domain.models.capture_options import (
    CaptureAction, CaptureOptions, CaptureRegion, NO_APPLICATION, is_valid_command
)


def test_defaults():
    options = CaptureOptions()

    assert options.region is CaptureRegion.FULLSCREEN
    assert options.action is CaptureAction.SAVE
    assert options.delay_seconds == 0
    assert options.show_save_dialog is True
    assert options.open_with_command == NO_APPLICATION


def test_selecting_region_replaces_previous_choice():
    options = CaptureOptions()

    assert options.select_region("select").is_success
    assert options.region is CaptureRegion.SELECT
    assert options.select_region(CaptureRegion.ACTIVE_WINDOW).is_success
    assert options.region is CaptureRegion.ACTIVE_WINDOW


def test_unknown_region_leaves_state_untouched():
    options = CaptureOptions()

    result = options.select_region("left-half")

    assert result.is_failure
    assert result.error.category == ErrorCategory.VALIDATION
    assert options.region is CaptureRegion.FULLSCREEN


def test_unknown_action_is_rejected():
    options = CaptureOptions()

    assert options.select_action("print").is_failure
    assert options.action is CaptureAction.SAVE


@pytest.mark.parametrize("delay", [-1, "abc", None])
def test_invalid_delay_is_rejected(delay):
    options = CaptureOptions(delay_seconds=3)

    assert options.set_delay(delay).is_failure
    assert options.delay_seconds == 3


def test_delay_accepts_numeric_strings():
    options = CaptureOptions()

    assert options.set_delay("5").is_success
    assert options.delay_seconds == 5


def test_default_directory_is_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    options = CaptureOptions()

    assert options.set_default_directory("shots").is_success
    assert options.default_directory == os.path.join(str(tmp_path), "shots")
    assert options.set_default_directory("").is_failure


def test_open_with_command_must_be_executable():
    options = CaptureOptions()

    assert options.set_open_with_command(sys.executable).is_success
    assert options.open_with_command == sys.executable

    assert options.set_open_with_command("/no/such/viewer").is_failure
    assert options.open_with_command == sys.executable

    assert options.set_open_with_command(NO_APPLICATION).is_success
    assert options.open_with_command == NO_APPLICATION


def test_is_valid_command():
    assert is_valid_command(NO_APPLICATION)
    assert is_valid_command(sys.executable)
    assert not is_valid_command("")
    assert not is_valid_command("definitely-not-an-installed-program-42")


def test_dict_round_trip(tmp_path):
    options = CaptureOptions(
        region=CaptureRegion.SELECT,
        action=CaptureAction.OPEN,
        delay_seconds=2,
        show_save_dialog=False,
        default_directory=str(tmp_path),
        open_with_command=sys.executable,
    )

    restored = CaptureOptions.from_dict(options.to_dict())

    assert restored == options


def test_from_dict_skips_invalid_values():
    options = CaptureOptions.from_dict({
        "region": "nowhere",
        "action": 7,
        "delay": -4,
        "screenshot_dir": "",
        "app": "/uninstalled/viewer",
    })

    assert options == CaptureOptions()


@pytest.mark.parametrize("data", [
    {"screenshot_dir": 5},
    {"screenshot_dir": ["x"]},
    {"app": 5},
    {"app": ["viewer"]},
    {"show_save_dialog": "false"},
    {"show_save_dialog": 0},
    {"region": ["select"]},
    {"delay": [1]},
])
def test_from_dict_ignores_wrongly_typed_values(data):
    assert CaptureOptions.from_dict(data) == CaptureOptions()


def test_show_save_dialog_accepts_only_booleans():
    options = CaptureOptions()

    assert options.set_show_save_dialog("false").is_failure
    assert options.show_save_dialog is True
    assert options.set_show_save_dialog(False).is_success
    assert options.show_save_dialog is False


def test_non_string_paths_are_rejected():
    options = CaptureOptions()

    assert options.set_default_directory(42).error.category == ErrorCategory.VALIDATION
    assert options.set_open_with_command(None).error.category == ErrorCategory.VALIDATION
    assert not is_valid_command(7)
