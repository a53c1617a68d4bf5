# screenshooter/application/upload_service.py
"""
The "upload to IPFS" action.

Shows a busy dialog, submits an IpfsUploadJob and maps its events onto the
UI. The dialog is hidden on Finished, whatever the outcome.
"""
from typing import Any, Callable, Optional

from screenshooter.domain.services.i_upload_service import IUploadService
from screenshooter.domain.services.i_background_task_service import IBackgroundTaskService, Job, JobHandle
from screenshooter.domain.services.i_config_repository_service import IConfigRepository, UploadSettings
from screenshooter.domain.services.i_ui_service import IUIService
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.models.job_events import (
    AskForInput, Finished, ImageUploaded, InfoMessage, JobError, JobEvent
)
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import ValidationError
from screenshooter.infrastructure.network.ipfs_upload_job import IpfsUploadJob

DIALOG_TITLE = "IPFS"

JobFactory = Callable[[str, str, UploadSettings], Job]


class UploadEventRouter:
    """Turns the events of one upload job into UI calls."""

    def __init__(self, ui_service: IUIService, logger: ILoggerService, gateway_url: str, dialog: Any):
        self.ui_service = ui_service
        self.logger = logger
        self.gateway_url = gateway_url
        self.dialog = dialog
        self.identifier: Optional[str] = None

    def __call__(self, event: JobEvent) -> None:
        if isinstance(event, InfoMessage):
            self.ui_service.update_message(self.dialog, event.text)
        elif isinstance(event, AskForInput):
            event.reply(self.ui_service.ask_for_information(event.prompt))
        elif isinstance(event, ImageUploaded):
            self.identifier = event.identifier
            self._hide_dialog()
            self.ui_service.show_message(DIALOG_TITLE, self.describe_upload(event.identifier))
        elif isinstance(event, JobError):
            self._hide_dialog()
            self.ui_service.show_error(event.message)
        elif isinstance(event, Finished):
            self._hide_dialog()

    def _hide_dialog(self) -> None:
        if self.dialog is not None:
            self.ui_service.hide(self.dialog)
            self.dialog = None

    def describe_upload(self, identifier: Optional[str]) -> str:
        if identifier is None:
            return "The screenshot was uploaded, but the server returned no identifier."
        return f"The screenshot was uploaded.\n\nIdentifier: {identifier}\nLink: {self.gateway_url}{identifier}"


class UploadService(IUploadService):

    def __init__(self, task_service: IBackgroundTaskService, ui_service: IUIService,
                 config_repository: IConfigRepository, logger: ILoggerService,
                 job_factory: Optional[JobFactory] = None):
        self.task_service = task_service
        self.ui_service = ui_service
        self.config_repository = config_repository
        self.logger = logger
        self._job_factory = job_factory or self._create_job

    def upload_screenshot(self, image_path: str, title: str = "") -> Result[JobHandle]:
        if not image_path:
            return Result.fail(ValidationError("No screenshot to upload"))

        settings = self.config_repository.get_upload_settings()
        job = self._job_factory(image_path, title, settings)

        dialog = self.ui_service.show_progress_dialog(DIALOG_TITLE, on_cancel=job.cancel)
        router = UploadEventRouter(self.ui_service, self.logger, settings.gateway_url, dialog)

        result = self.task_service.submit(job, router)
        if result.is_failure:
            self.ui_service.hide(dialog)
            self.ui_service.show_error(result.error.message)
            return result

        self.logger.info(f"Upload of {image_path} submitted as '{result.value.job_id}'")
        return result

    def _create_job(self, image_path: str, title: str, settings: UploadSettings) -> Job:
        return IpfsUploadJob(image_path, title, self.logger,
                             upload_url=settings.upload_url,
                             timeout=settings.timeout_seconds)
