"""Shared fixtures for the Screenshooter test suite."""
import logging
import os

# Must be set before Qt is imported anywhere
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PIL import Image

from screenshooter.domain.common.result import Result
from screenshooter.domain.services.i_ui_service import IUIService
from screenshooter.infrastructure.logging.logger_service import ConsoleLoggerService


class FakeUIService(IUIService):
    """Records every presentation call instead of showing dialogs."""

    def __init__(self):
        self.calls = []
        self.errors = []
        self.messages = []
        self.prompts = []
        self.save_location = None
        self.answer = None

    def show_progress_dialog(self, title, on_cancel=None):
        handle = {"title": title, "on_cancel": on_cancel, "text": None}
        self.calls.append(("show_progress_dialog", title))
        return handle

    def update_message(self, handle, text):
        handle["text"] = text
        self.calls.append(("update_message", text))

    def hide(self, handle):
        self.calls.append(("hide", handle["title"]))

    def show_error(self, message):
        self.errors.append(message)
        self.calls.append(("show_error", message))
        return Result.ok(True)

    def show_message(self, title, message):
        self.messages.append((title, message))
        self.calls.append(("show_message", title))
        return Result.ok(True)

    def prompt_save_location(self, default_dir, default_name, preview):
        self.prompts.append((default_dir, default_name, preview))
        self.calls.append(("prompt_save_location", default_name))
        return Result.ok(self.save_location)

    def ask_for_information(self, prompt):
        self.calls.append(("ask_for_information", prompt))
        return self.answer


@pytest.fixture
def logger():
    return ConsoleLoggerService(level=logging.DEBUG, name="ScreenshooterTests")


@pytest.fixture
def ui():
    return FakeUIService()


@pytest.fixture
def image():
    return Image.new("RGB", (50, 40), "red")


@pytest.fixture
def png_file(tmp_path, image):
    path = tmp_path / "shot.png"
    image.save(path, format="PNG")
    return path
