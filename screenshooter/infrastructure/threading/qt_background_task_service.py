# screenshooter/infrastructure/threading/qt_background_task_service.py
"""
Qt implementation of the background job service.

Each submitted job runs on its own QThread. Job events travel back through a
single queued signal per job, so they reach listeners on the thread that owns
the service (the UI thread) in the order the job emitted them.
"""
import itertools
import traceback
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot, Qt, QMutex, QMutexLocker, QTimer, QEventLoop

from screenshooter.domain.services.i_background_task_service import (
    IBackgroundTaskService, Job, JobHandle, JobListener
)
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.models.job_events import Finished, JobEvent, JobState
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import ValidationError


class JobSignals(QObject):
    """
    Signals carrying a job's events out of its worker thread.

    Signals:
        event: (job_id, JobEvent) for every event the job emits
    """
    event = Signal(str, object)


class JobWrapper(QObject):
    """
    Qt wrapper running a domain Job inside a QThread.

    Replaces the job's direct listener calls with emissions of a queued signal.
    """

    def __init__(self, job: Job[Any], logger: ILoggerService, job_id: str):
        super().__init__()
        self.job = job
        self.logger = logger
        self.job_id = job_id
        self.signals = JobSignals()

        self.job.set_emitter(lambda event: self.signals.event.emit(self.job_id, event))

    @Slot()
    def run(self):
        """Execute the job. Called on the worker thread when it starts."""
        try:
            self.logger.debug(f"Job '{self.job_id}' starting execution")
            state = self.job.run()
            self.logger.debug(f"Job '{self.job_id}' ended {state.value}")
        except Exception as e:
            # Job.run converts job failures into events, so this is a broken job
            self.logger.error(f"Unhandled error running job '{self.job_id}': {e}")
            self.logger.debug(traceback.format_exc())


class _JobEventDispatcher(QObject):
    """Lives on the service's thread and hands queued events to listeners."""

    def __init__(self, service: 'QtBackgroundTaskService'):
        super().__init__()
        self._service = service

    @Slot(str, object)
    def deliver(self, job_id: str, event: JobEvent):
        self._service._deliver(job_id, event)


class TaskInfo:
    """Thread, wrapper and job belonging to one submitted job."""

    def __init__(self, job_id: str, thread: QThread, wrapper: JobWrapper, job: Job[Any]):
        self.job_id = job_id
        self.thread = thread
        self.wrapper = wrapper
        self.job = job

    def disconnect_signals(self):
        try:
            self.wrapper.signals.event.disconnect()
        except (TypeError, RuntimeError):
            pass  # already disconnected


class QtBackgroundTaskService(IBackgroundTaskService):
    """
    Runs jobs on QThreads and delivers their events on the owning thread.

    Must be created on the UI thread, which must run a Qt event loop for
    events to be delivered.
    """

    def __init__(self, logger: ILoggerService):
        self.logger = logger
        self.tasks: Dict[str, TaskInfo] = {}
        self._stopping: List[TaskInfo] = []
        self.mutex = QMutex()
        self._ids = itertools.count(1)
        self._dispatcher = _JobEventDispatcher(self)

    def submit(self, job: Job[Any], *listeners: JobListener, job_id: Optional[str] = None) -> Result[JobHandle]:
        if job.state is not JobState.PENDING:
            self.logger.warning(f"Refusing to resubmit {type(job).__name__} in state {job.state.value}")
            return Result.fail(ValidationError(
                message="A job can only be submitted once",
                details={"state": job.state.value}
            ))

        job_id = job_id or f"{job.job_type}-{next(self._ids)}"
        locker = QMutexLocker(self.mutex)

        try:
            if job_id in self.tasks:
                self.logger.warning(f"Job '{job_id}' is already running")
                return Result.fail(ValidationError(
                    message=f"Job '{job_id}' is already running",
                    details={"job_id": job_id}
                ))

            self.logger.debug(f"Starting job '{job_id}'")

            for listener in listeners:
                job.add_listener(listener)

            thread = QThread()
            wrapper = JobWrapper(job, self.logger, job_id)
            wrapper.moveToThread(thread)

            thread.started.connect(wrapper.run)
            thread.finished.connect(wrapper.deleteLater)

            # Queued so listeners always run on the dispatcher's thread
            wrapper.signals.event.connect(self._dispatcher.deliver, Qt.QueuedConnection)

            self.tasks[job_id] = TaskInfo(job_id, thread, wrapper, job)
            thread.start()

            return Result.ok(JobHandle(job_id, job, self))
        except Exception as e:
            error_message = f"Error starting job '{job_id}': {e}"
            self.logger.error(error_message)
            self.logger.debug(traceback.format_exc())
            return Result.fail(error_message)
        finally:
            locker.unlock()

    def cancel_job(self, job_id: str) -> Result[bool]:
        """
        Request cancellation of a job.

        The worker is not interrupted: a job already inside its network call
        completes and still reports its outcome, followed by Finished.
        """
        locker = QMutexLocker(self.mutex)
        try:
            task_info = self.tasks.get(job_id)
        finally:
            locker.unlock()

        if task_info is None:
            self.logger.warning(f"Cannot cancel job '{job_id}' - not found")
            return Result.fail(f"Job '{job_id}' not found")

        self.logger.debug(f"Cancelling job '{job_id}'")
        task_info.job.cancel()
        return Result.ok(True)

    def is_job_running(self, job_id: str) -> bool:
        locker = QMutexLocker(self.mutex)
        try:
            return job_id in self.tasks
        finally:
            locker.unlock()

    def get_running_jobs(self) -> List[str]:
        locker = QMutexLocker(self.mutex)
        try:
            return list(self.tasks.keys())
        finally:
            locker.unlock()

    def cancel_all_jobs(self) -> None:
        for job_id in self.get_running_jobs():
            self.cancel_job(job_id)

    def wait_for_job(self, job_id: str, timeout_ms: int = 30000) -> Result[bool]:
        """
        Wait for a job's Finished event to be delivered.

        Runs a nested event loop, so the job's events keep flowing to its
        listeners while waiting.
        """
        if not self.is_job_running(job_id):
            return Result.ok(False)

        try:
            wait_loop = QEventLoop()

            check_timer = QTimer()
            check_timer.setInterval(50)

            timeout_timer = QTimer()
            timeout_timer.setSingleShot(True)
            timeout_timer.setInterval(timeout_ms)

            completion_status = {"completed": False, "timed_out": False}

            def check_job_status():
                if not self.is_job_running(job_id):
                    completion_status["completed"] = True
                    check_timer.stop()
                    wait_loop.quit()

            def on_timeout():
                completion_status["timed_out"] = True
                check_timer.stop()
                wait_loop.quit()

            check_timer.timeout.connect(check_job_status)
            timeout_timer.timeout.connect(on_timeout)

            check_timer.start()
            timeout_timer.start()
            wait_loop.exec()
            timeout_timer.stop()

            if completion_status["timed_out"] and not completion_status["completed"]:
                return Result.fail(f"Timeout waiting for job '{job_id}' to finish")

            return Result.ok(True)

        except Exception as e:
            error_message = f"Error waiting for job '{job_id}': {e}"
            self.logger.error(error_message)
            self.logger.debug(traceback.format_exc())
            return Result.fail(error_message)

    def shutdown(self, timeout_ms: int = 5000) -> None:
        """Cancel every job and stop worker threads. Undelivered events are dropped."""
        self.cancel_all_jobs()
        for job_id in self.get_running_jobs():
            self._cleanup_task(job_id, timeout_ms)

    def _deliver(self, job_id: str, event: JobEvent) -> None:
        locker = QMutexLocker(self.mutex)
        try:
            task_info = self.tasks.get(job_id)
        finally:
            locker.unlock()

        if task_info is None:
            self.logger.debug(f"Dropping {type(event).__name__} for unknown job '{job_id}'")
            return

        # Listeners may submit or cancel jobs, so the mutex is not held here
        task_info.job.deliver(event)

        if isinstance(event, Finished):
            self._cleanup_task(job_id)

    def _cleanup_task(self, job_id: str, timeout_ms: int = 2000) -> None:
        """Stop the worker thread of a job and forget it."""
        locker = QMutexLocker(self.mutex)
        try:
            task_info = self.tasks.pop(job_id, None)
        finally:
            locker.unlock()

        if task_info is None:
            return

        try:
            task_info.disconnect_signals()
            task_info.thread.quit()

            if not task_info.thread.wait(timeout_ms):
                # The job is still blocked (e.g. in its HTTP call); it will
                # exit on its own, keep the thread object alive until then.
                self.logger.warning(f"Worker thread of job '{job_id}' is still busy")
                task_info.thread.finished.connect(lambda info=task_info: self._release(info))
                self._stopping.append(task_info)

            self.logger.debug(f"Job '{job_id}' resources cleaned up")
        except Exception as e:
            self.logger.error(f"Error cleaning up job '{job_id}': {e}")

    def _release(self, task_info: TaskInfo) -> None:
        if task_info in self._stopping:
            self._stopping.remove(task_info)
