import threading
import time

import pytest
import responses

from screenshooter.domain.common.result import Result
from screenshooter.domain.models.job_events import (
    AskForInput, Finished, ImageUploaded, InfoMessage, JobError, JobState
)
from screenshooter.domain.services.i_background_task_service import Job
from screenshooter.infrastructure.config.json_config_repository import DEFAULT_UPLOAD_URL
from screenshooter.infrastructure.network.ipfs_upload_job import IpfsUploadJob
from screenshooter.infrastructure.threading.qt_background_task_service import QtBackgroundTaskService


class StepJob(Job[str]):
    """Reports a few messages, optionally waiting on a gate first."""

    job_type = "steps"

    def __init__(self, logger, steps=3, gate=None, question=None):
        super().__init__(logger)
        self.steps = steps
        self.gate = gate
        self.question = question
        self.worker_thread = None

    def execute(self):
        self.worker_thread = threading.get_ident()
        if self.gate is not None:
            self.gate.wait(5)
        self.check_cancellation()
        for i in range(self.steps):
            self.report_info(f"step {i}")
        if self.question:
            return Result.ok(self.ask_for_input(self.question, timeout=5))
        return Result.ok("done")

    def success_event(self, value):
        return ImageUploaded(value)


class Recorder:
    def __init__(self):
        self.events = []
        self.threads = set()

    def __call__(self, event):
        self.events.append(event)
        self.threads.add(threading.get_ident())

    @property
    def finished(self):
        return any(isinstance(e, Finished) for e in self.events)


@pytest.fixture
def service(qtbot, logger):
    service = QtBackgroundTaskService(logger)
    yield service
    service.shutdown()


def test_events_arrive_in_order_on_the_owning_thread(service, qtbot, logger):
    recorder = Recorder()
    job = StepJob(logger)

    handle = service.submit(job, recorder).value
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    assert recorder.events == [
        InfoMessage("step 0"),
        InfoMessage("step 1"),
        InfoMessage("step 2"),
        ImageUploaded("done"),
        Finished(JobState.SUCCEEDED),
    ]
    assert recorder.threads == {threading.get_ident()}
    assert job.worker_thread != threading.get_ident()
    assert handle.state is JobState.SUCCEEDED
    assert handle.job_id.startswith("steps-")


def test_finished_is_delivered_exactly_once_and_job_is_released(service, qtbot, logger):
    recorder = Recorder()
    handle = service.submit(StepJob(logger, steps=0), recorder).value

    qtbot.waitUntil(lambda: not service.is_job_running(handle.job_id), timeout=5000)
    qtbot.wait(50)

    assert sum(isinstance(e, Finished) for e in recorder.events) == 1
    assert handle.job_id not in service.get_running_jobs()


def test_listener_added_through_handle_sees_every_event(service, qtbot, logger):
    late = Recorder()
    handle = service.submit(StepJob(logger, steps=2)).value
    handle.add_listener(late)

    qtbot.waitUntil(lambda: late.finished, timeout=5000)

    assert late.events[0] == InfoMessage("step 0")
    assert len(late.events) == 4


def test_submitting_a_used_job_is_rejected(service, qtbot, logger):
    recorder = Recorder()
    job = StepJob(logger)
    service.submit(job, recorder)
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    result = service.submit(job)

    assert result.is_failure


def test_duplicate_job_id_is_rejected(service, qtbot, logger):
    gate = threading.Event()
    first = service.submit(StepJob(logger, gate=gate), job_id="shared")

    second = service.submit(StepJob(logger), job_id="shared")
    gate.set()

    assert first.is_success
    assert second.is_failure
    qtbot.waitUntil(lambda: not service.is_job_running("shared"), timeout=5000)


def test_cancel_before_work_emits_only_finished(service, qtbot, logger):
    gate = threading.Event()
    recorder = Recorder()
    handle = service.submit(StepJob(logger, gate=gate), recorder).value

    assert handle.cancel().is_success
    gate.set()
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    assert recorder.events == [Finished(JobState.CANCELLED)]


def test_cancel_unknown_job_fails(service):
    assert service.cancel_job("nope").is_failure


def test_listener_can_answer_questions(service, qtbot, logger):
    recorder = Recorder()

    def answer(event):
        if isinstance(event, AskForInput):
            event.reply("Holiday")

    service.submit(StepJob(logger, steps=0, question="Title?"), answer, recorder)
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    assert ImageUploaded("Holiday") in recorder.events


def test_failing_listener_does_not_block_others(service, qtbot, logger):
    recorder = Recorder()

    def broken(event):
        raise RuntimeError("listener bug")

    service.submit(StepJob(logger, steps=1), broken, recorder)
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    assert len(recorder.events) == 3


def test_jobs_run_concurrently(service, qtbot, logger):
    gate = threading.Event()
    blocked = Recorder()
    free = Recorder()

    service.submit(StepJob(logger, gate=gate), blocked)
    service.submit(StepJob(logger), free)
    qtbot.waitUntil(lambda: free.finished, timeout=5000)

    assert not blocked.finished
    gate.set()
    qtbot.waitUntil(lambda: blocked.finished, timeout=5000)


def test_wait_for_job(service, logger):
    gate = threading.Event()
    handle = service.submit(StepJob(logger, gate=gate)).value
    threading.Timer(0.1, gate.set).start()

    result = service.wait_for_job(handle.job_id, timeout_ms=5000)

    assert result.is_success
    assert handle.state is JobState.SUCCEEDED


def test_wait_for_job_times_out(service, logger):
    gate = threading.Event()
    handle = service.submit(StepJob(logger, gate=gate)).value

    started = time.monotonic()
    result = service.wait_for_job(handle.job_id, timeout_ms=100)
    gate.set()

    assert result.is_failure
    assert time.monotonic() - started < 4


@responses.activate
def test_upload_job_through_the_runner(service, qtbot, png_file, logger, monkeypatch):
    monkeypatch.delenv("http_proxy", raising=False)
    responses.add(responses.POST, DEFAULT_UPLOAD_URL, json={"Hash": "QmRunner"}, status=200)
    recorder = Recorder()

    service.submit(IpfsUploadJob(str(png_file), "", logger), recorder)
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    assert [type(e) for e in recorder.events] == [InfoMessage, ImageUploaded, Finished]
    assert recorder.events[1].identifier == "QmRunner"


@responses.activate
def test_failed_upload_through_the_runner(service, qtbot, png_file, logger, monkeypatch):
    monkeypatch.delenv("http_proxy", raising=False)
    responses.add(responses.POST, DEFAULT_UPLOAD_URL, body="denied", status=403)
    recorder = Recorder()

    service.submit(IpfsUploadJob(str(png_file), "", logger), recorder)
    qtbot.waitUntil(lambda: recorder.finished, timeout=5000)

    assert [type(e) for e in recorder.events] == [InfoMessage, JobError, Finished]
    assert recorder.events[1].message == "Forbidden"
