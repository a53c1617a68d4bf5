import pytest

from screenshooter.application.upload_service import DIALOG_TITLE, UploadEventRouter, UploadService
from screenshooter.domain.common.errors import ErrorCategory, HttpError
from screenshooter.domain.common.result import Result
from screenshooter.domain.models.job_events import (
    AskForInput, Finished, ImageUploaded, InfoMessage, JobError, JobState
)
from screenshooter.domain.services.i_background_task_service import Job, JobHandle
from screenshooter.infrastructure.config.json_config_repository import JsonConfigRepository
from screenshooter.infrastructure.network.ipfs_upload_job import IpfsUploadJob


class InlineTaskService:
    """Runs submitted jobs synchronously on the calling thread."""

    def __init__(self, reject=False):
        self.reject = reject
        self.cancelled = []

    def submit(self, job, *listeners, job_id=None):
        if self.reject:
            return Result.fail("runner unavailable")
        for listener in listeners:
            job.add_listener(listener)
        job.run()
        return Result.ok(JobHandle(job_id or "inline-1", job, self))

    def cancel_job(self, job_id):
        self.cancelled.append(job_id)
        return Result.ok(True)


class CannedJob(Job):
    def __init__(self, logger, outcome):
        super().__init__(logger)
        self.outcome = outcome

    def execute(self):
        self.report_info("Upload the screenshot...")
        return self.outcome

    def success_event(self, value):
        return ImageUploaded(value)


@pytest.fixture
def config(tmp_path, logger):
    return JsonConfigRepository(str(tmp_path / "config.json"), logger)


def make_service(ui, config, logger, outcome, reject=False):
    created = []

    def factory(path, title, settings):
        job = CannedJob(logger, outcome)
        created.append((path, title, job, settings))
        return job

    service = UploadService(InlineTaskService(reject), ui, config, logger, job_factory=factory)
    return service, created


def test_successful_upload_shows_identifier_and_link(ui, config, logger):
    service, created = make_service(ui, config, logger, Result.ok("QmHash"))

    result = service.upload_screenshot("/tmp/shot.png", "title")

    assert result.is_success
    assert result.value.state is JobState.SUCCEEDED
    assert created[0][:2] == ("/tmp/shot.png", "title")
    assert ("show_progress_dialog", DIALOG_TITLE) in ui.calls
    assert ("update_message", "Upload the screenshot...") in ui.calls
    title, message = ui.messages[0]
    assert title == DIALOG_TITLE
    assert "QmHash" in message
    assert "https://ipfs.io/ipfs/QmHash" in message
    assert ui.calls.count(("hide", DIALOG_TITLE)) == 1


def test_failed_upload_shows_server_reason(ui, config, logger):
    service, _ = make_service(ui, config, logger, Result.fail(HttpError(502, "Bad Gateway")))

    result = service.upload_screenshot("/tmp/shot.png")

    assert result.is_success
    assert result.value.state is JobState.FAILED
    assert ui.errors == ["Bad Gateway"]
    assert ui.messages == []
    assert ui.calls.count(("hide", DIALOG_TITLE)) == 1


def test_progress_dialog_cancel_cancels_job(ui, config, logger):
    service, created = make_service(ui, config, logger, Result.ok("x"))
    ui_show = ui.show_progress_dialog
    handles = []

    def capture(title, on_cancel=None):
        handle = ui_show(title, on_cancel)
        handles.append(handle)
        return handle

    ui.show_progress_dialog = capture
    service.upload_screenshot("/tmp/shot.png")

    handles[0]["on_cancel"]()
    assert created[0][2].cancel_requested


def test_rejected_submission_hides_dialog_and_reports(ui, config, logger):
    service, _ = make_service(ui, config, logger, Result.ok("x"), reject=True)

    result = service.upload_screenshot("/tmp/shot.png")

    assert result.is_failure
    assert ("hide", DIALOG_TITLE) in ui.calls
    assert ui.errors == ["runner unavailable"]


def test_empty_path_is_rejected(ui, config, logger):
    service, created = make_service(ui, config, logger, Result.ok("x"))

    result = service.upload_screenshot("")

    assert result.error.category == ErrorCategory.VALIDATION
    assert created == []
    assert ui.calls == []


def test_router_without_identifier(ui, logger):
    router = UploadEventRouter(ui, logger, "https://gw/", ui.show_progress_dialog(DIALOG_TITLE))

    router(ImageUploaded(None))
    router(Finished(JobState.SUCCEEDED))

    assert ui.messages == [(DIALOG_TITLE, "The screenshot was uploaded, but the server returned no identifier.")]
    assert ui.calls.count(("hide", DIALOG_TITLE)) == 1


def test_router_answers_questions_from_the_ui(ui, logger):
    ui.answer = "Holiday"
    router = UploadEventRouter(ui, logger, "https://gw/", ui.show_progress_dialog(DIALOG_TITLE))
    question = AskForInput("Title?")

    router(question)

    assert question.wait_for_reply(0) == "Holiday"


def test_router_cancelled_job_only_hides_dialog(ui, logger):
    router = UploadEventRouter(ui, logger, "https://gw/", ui.show_progress_dialog(DIALOG_TITLE))

    router(InfoMessage("Upload the screenshot..."))
    router(Finished(JobState.CANCELLED))

    assert ui.errors == []
    assert ui.messages == []
    assert ui.calls[-1] == ("hide", DIALOG_TITLE)


def test_router_error_then_finished(ui, logger):
    router = UploadEventRouter(ui, logger, "https://gw/", ui.show_progress_dialog(DIALOG_TITLE))

    router(JobError(HttpError(500, "Internal Server Error")))
    router(Finished(JobState.FAILED))

    assert ui.errors == ["Internal Server Error"]
    assert ui.calls.count(("hide", DIALOG_TITLE)) == 1


def test_upload_settings_are_read_once_and_handed_to_the_job(ui, config, logger, monkeypatch):
    config.set_global_setting("upload_url", "http://mirror.local/add")
    reads = []
    original = config.get_upload_settings

    def counting():
        reads.append(1)
        return original()

    monkeypatch.setattr(config, "get_upload_settings", counting)
    service, created = make_service(ui, config, logger, Result.ok("x"))

    service.upload_screenshot("/tmp/shot.png")

    assert len(reads) == 1
    assert created[0][3].upload_url == "http://mirror.local/add"


def test_default_factory_builds_upload_job_from_settings(ui, config, logger):
    config.set_global_setting("upload_url", "http://mirror.local/add")
    config.set_global_setting("upload_timeout", 7)
    service = UploadService(InlineTaskService(), ui, config, logger)

    job = service._create_job("/tmp/shot.png", "t", config.get_upload_settings())

    assert isinstance(job, IpfsUploadJob)
    assert job.upload_url == "http://mirror.local/add"
    assert job.timeout == 7.0
