#screenshooter/application/app.py

import argparse
import os
import sys
from typing import List, Optional

from PIL import Image
from PySide6.QtWidgets import QApplication

from screenshooter.domain.common.di_container import DIContainer
from screenshooter.domain.models.job_events import JobState
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.services.i_background_task_service import IBackgroundTaskService
from screenshooter.domain.services.i_config_repository_service import IConfigRepository
from screenshooter.domain.services.i_screenshot_save_service import IFilenameAllocator, IScreenshotSaveService
from screenshooter.domain.services.i_ui_service import IUIService
from screenshooter.domain.services.i_upload_service import IUploadService

from screenshooter.infrastructure.logging.logger_service import FileLoggerService, parse_level
from screenshooter.infrastructure.threading.qt_background_task_service import QtBackgroundTaskService
from screenshooter.infrastructure.config.json_config_repository import JsonConfigRepository, default_config_path
from screenshooter.infrastructure.storage.filename_allocator import FilenameAllocator
from screenshooter.infrastructure.storage.screenshot_save_service import ScreenshotSaveService
from screenshooter.infrastructure.ui.qt_ui_service import QtUIService
from screenshooter.application.upload_service import UploadService
from screenshooter.application.screenshot_actions import ScreenshotActions

LOG_LEVEL_ENV_VAR = "SCREENSHOOTER_LOG_LEVEL"


def initialize_app(config_file: Optional[str] = None) -> DIContainer:
    """Build the service container. A QApplication must exist already."""
    container = DIContainer()
    config_file = config_file or default_config_path()

    logger = FileLoggerService(
        level=parse_level(os.environ.get(LOG_LEVEL_ENV_VAR)),
        log_dir=os.path.join(os.path.dirname(os.path.abspath(config_file)), "logs")
    )
    container.register_instance(ILoggerService, logger)

    config_repo = JsonConfigRepository(config_file, logger)
    container.register_instance(IConfigRepository, config_repo)

    # Environment wins over the stored level
    if not os.environ.get(LOG_LEVEL_ENV_VAR):
        logger.set_level(parse_level(config_repo.get_global_setting("log_level")))

    task_service = QtBackgroundTaskService(logger)
    container.register_instance(IBackgroundTaskService, task_service)

    container.register_singleton(
        IUIService,
        lambda: QtUIService(container.resolve(ILoggerService))
    )

    container.register_factory(
        IFilenameAllocator,
        lambda: FilenameAllocator(container.resolve(ILoggerService))
    )

    container.register_singleton(
        IScreenshotSaveService,
        lambda: ScreenshotSaveService(
            allocator=container.resolve(IFilenameAllocator),
            ui_service=container.resolve(IUIService),
            logger=container.resolve(ILoggerService)
        )
    )

    container.register_singleton(
        IUploadService,
        lambda: UploadService(
            task_service=container.resolve(IBackgroundTaskService),
            ui_service=container.resolve(IUIService),
            config_repository=container.resolve(IConfigRepository),
            logger=container.resolve(ILoggerService)
        )
    )

    container.register_singleton(
        ScreenshotActions,
        lambda: ScreenshotActions(
            save_service=container.resolve(IScreenshotSaveService),
            ui_service=container.resolve(IUIService),
            logger=container.resolve(ILoggerService)
        )
    )

    logger.info("Application dependencies initialized")
    return container


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="screenshooter", description="Save or upload screenshots.")
    parser.add_argument("--config", help="Path to the JSON configuration file")
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Upload an image file to IPFS")
    upload.add_argument("image")
    upload.add_argument("--title", default="")

    save = commands.add_parser("save", help="Save an image as a new screenshot")
    save.add_argument("image")
    save.add_argument("--no-dialog", action="store_true", help="Write to the default folder without asking")

    finalize = commands.add_parser("finalize", help="Apply the configured action to an image")
    finalize.add_argument("image")
    return parser


def _run_upload(container: DIContainer, image: str, title: str) -> int:
    submitted = container.resolve(IUploadService).upload_screenshot(image, title)
    if submitted.is_failure:
        return 1

    handle = submitted.value
    timeout_ms = int(container.resolve(IConfigRepository).get_upload_settings().timeout_seconds * 1000) + 30000
    waited = container.resolve(IBackgroundTaskService).wait_for_job(handle.job_id, timeout_ms)
    if waited.is_failure:
        container.resolve(ILoggerService).error(str(waited.error))
        return 1
    return 0 if handle.state is JobState.SUCCEEDED else 1


def _open_image(container: DIContainer, path: str) -> Optional[Image.Image]:
    try:
        image = Image.open(path)
        image.load()
        return image
    except (OSError, ValueError) as e:
        message = f"Cannot open image {path}: {e}"
        container.resolve(ILoggerService).error(message)
        container.resolve(IUIService).show_error(message)
        return None


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName("Screenshooter")

    container = initialize_app(args.config)
    logger = container.resolve(ILoggerService)
    task_service = container.resolve(IBackgroundTaskService)

    try:
        if args.command == "upload":
            return _run_upload(container, args.image, args.title)

        image = _open_image(container, args.image)
        if image is None:
            return 1

        options_result = container.resolve(IConfigRepository).load_capture_options()
        if options_result.is_failure:
            container.resolve(IUIService).show_error(options_result.error.message)
            return 1
        options = options_result.value

        if args.command == "save":
            if args.no_dialog:
                options.set_show_save_dialog(False)
            result = container.resolve(IScreenshotSaveService).save_with_options(image, options)
        else:
            result = container.resolve(ScreenshotActions).finalize(image, options)

        if result.is_success:
            print(result.value)
            return 0
        logger.debug(f"{args.command} did not complete: {result.error}")
        return 1
    finally:
        task_service.shutdown()


if __name__ == "__main__":
    sys.exit(main())
