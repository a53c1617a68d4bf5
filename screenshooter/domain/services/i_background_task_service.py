#screenshooter/domain/services/i_background_task_service.py
"""
Background job interface.

Defines the Job base class with its event lifecycle, the handle returned on
submission, and the contract for services that run jobs off the UI thread.
"""
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, List, Optional, TypeVar

from screenshooter.domain.common.errors import DomainError, JobCancelledError
from screenshooter.domain.common.result import Result
from screenshooter.domain.models.job_events import (
    AskForInput, Finished, InfoMessage, JobError, JobEvent, JobState
)
from screenshooter.domain.services.i_logger_service import ILoggerService

T = TypeVar('T')

JobListener = Callable[[JobEvent], None]

# Long enough for a user to answer a dialog, short enough that an
# unanswered question cannot pin a worker thread forever.
DEFAULT_ASK_TIMEOUT = 300.0


class TaskCancelledException(Exception):
    """Raised inside a job when cancellation has been requested."""
    pass


class CancellationToken:
    """
    Token for coordinating cancellation across threads.

    Cancellation is advisory: jobs poll the token at safe points.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def throw_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise TaskCancelledException("Task was cancelled")


class Job(Generic[T]):
    """
    Base class for cancellable units of work.

    Subclasses implement execute() and success_event(). run() drives the
    lifecycle: it emits exactly one terminal event (unless the job ended
    cancelled) and then exactly one Finished. Events go to the emitter the
    runner installs, or straight to the listeners when run() is called
    directly.
    """

    job_type = "job"

    def __init__(self, logger: ILoggerService):
        self.logger = logger
        self._cancellation_token = CancellationToken()
        self._state = JobState.PENDING
        self._state_lock = threading.RLock()
        self._listeners: List[JobListener] = []
        self._emitter: Optional[Callable[[JobEvent], None]] = None
        self._terminal_emitted = False
        self._finished = False

    @property
    def state(self) -> JobState:
        with self._state_lock:
            return self._state

    @property
    def cancel_requested(self) -> bool:
        return self._cancellation_token.is_cancelled

    @property
    def is_finished(self) -> bool:
        return self._finished

    def cancel(self) -> None:
        """Request cancellation. Work already in progress is not interrupted."""
        self._cancellation_token.cancel()

    def check_cancellation(self) -> None:
        """
        Raises:
            TaskCancelledException: If cancellation has been requested
        """
        self._cancellation_token.throw_if_cancelled()

    def add_listener(self, listener: JobListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def set_emitter(self, emitter: Optional[Callable[[JobEvent], None]]) -> None:
        """Route events through emitter (e.g. a queued Qt signal) instead of calling listeners."""
        self._emitter = emitter

    def deliver(self, event: JobEvent) -> None:
        """Hand an event to every listener in registration order."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Job listener failed on {type(event).__name__}: {e}")

    def report_info(self, text: str) -> None:
        self._emit(InfoMessage(text))

    def ask_for_input(self, prompt: str, timeout: Optional[float] = DEFAULT_ASK_TIMEOUT) -> Optional[str]:
        """Ask the user a question and block this job until a listener replies."""
        event = AskForInput(prompt)
        self._emit(event)
        return event.wait_for_reply(timeout)

    def initialize(self) -> None:
        """Hook run on the worker before execute()."""
        pass

    def cleanup(self) -> None:
        """Hook run on the worker after execute(), whatever its outcome."""
        pass

    def execute(self) -> Result[T]:
        """
        Do the work. Called on the worker thread.

        Return a failed Result for expected failures; a failed Result whose
        error is a cancellation ends the job silently.
        """
        raise NotImplementedError

    def success_event(self, value: T) -> JobEvent:
        """The terminal event announcing a successful result."""
        raise NotImplementedError

    def run(self) -> JobState:
        """
        Execute the full lifecycle on the calling thread.

        Raises:
            RuntimeError: If the job has already been run
        """
        with self._state_lock:
            if self._state is not JobState.PENDING:
                raise RuntimeError(f"{type(self).__name__} cannot be run twice")
            self._state = JobState.RUNNING

        try:
            try:
                self.check_cancellation()
                self.initialize()
                result = self.execute()
            finally:
                self.cleanup()
        except TaskCancelledException:
            self.logger.debug(f"{type(self).__name__} cancelled before completion")
            self._complete(Result.fail(JobCancelledError()))
        except Exception as e:
            self.logger.exception(f"Unhandled error in {type(self).__name__}: {e}")
            self._fail(DomainError.from_exception(e))
        else:
            self._complete(result)
        finally:
            self._emit(Finished(self.state))

        return self.state

    def _complete(self, result: Result[T]) -> None:
        if result.is_failure:
            if result.error.is_cancellation:
                self._set_state(JobState.CANCELLED)
            else:
                self._fail(result.error)
            return

        # The state only becomes SUCCEEDED once the terminal event exists
        try:
            event = self.success_event(result.value)
        except Exception as e:
            self.logger.exception(f"Cannot build success event in {type(self).__name__}: {e}")
            self._fail(DomainError.from_exception(e))
            return

        self._set_state(JobState.SUCCEEDED)
        self._emit(event)

    def _fail(self, error: DomainError) -> None:
        self._set_state(JobState.FAILED)
        self._emit(JobError(error))

    def _set_state(self, state: JobState) -> None:
        with self._state_lock:
            self._state = state

    def _emit(self, event: JobEvent) -> None:
        if self._finished:
            self.logger.warning(f"Dropping {type(event).__name__} emitted after Finished")
            return
        if event.is_terminal:
            if self._terminal_emitted:
                self.logger.warning(f"Dropping second terminal event {type(event).__name__}")
                return
            self._terminal_emitted = True
        if isinstance(event, Finished):
            self._finished = True

        if self._emitter is not None:
            self._emitter(event)
        else:
            self.deliver(event)


class JobHandle:
    """Caller-side view of a submitted job."""

    def __init__(self, job_id: str, job: Job, service: 'IBackgroundTaskService'):
        self.job_id = job_id
        self.job = job
        self._service = service

    @property
    def state(self) -> JobState:
        return self.job.state

    @property
    def is_finished(self) -> bool:
        return self.job.is_finished

    def add_listener(self, listener: JobListener) -> None:
        """
        Listen to the job's events.

        Safe to call right after submit() as long as the UI thread has not
        yet returned to its event loop; no event is delivered before that.
        """
        self.job.add_listener(listener)

    def cancel(self) -> Result[bool]:
        return self._service.cancel_job(self.job_id)

    def __repr__(self) -> str:
        return f"JobHandle({self.job_id!r}, state={self.state.value})"


class IBackgroundTaskService(ABC):
    """
    Interface for services that execute jobs off the UI thread.

    Events of one job reach its listeners in emission order on the thread
    that owns the service. No ordering holds across jobs.
    """

    @abstractmethod
    def submit(self, job: Job[Any], *listeners: JobListener, job_id: Optional[str] = None) -> Result[JobHandle]:
        """
        Start a pending job on a worker thread.

        Args:
            job: Job to execute; must never have been run
            *listeners: Listeners registered before the job starts
            job_id: Optional identifier, generated when omitted

        Returns:
            Result containing the JobHandle
        """
        pass

    @abstractmethod
    def cancel_job(self, job_id: str) -> Result[bool]:
        """Request cancellation of a job. Its Finished event is still delivered."""
        pass

    @abstractmethod
    def is_job_running(self, job_id: str) -> bool:
        pass

    @abstractmethod
    def get_running_jobs(self) -> List[str]:
        pass

    @abstractmethod
    def cancel_all_jobs(self) -> None:
        pass

    @abstractmethod
    def wait_for_job(self, job_id: str, timeout_ms: int = 30000) -> Result[bool]:
        """Block (while processing UI events) until the job's Finished is delivered."""
        pass

    @abstractmethod
    def shutdown(self, timeout_ms: int = 5000) -> None:
        """Cancel every job and wait for the worker threads to stop."""
        pass
