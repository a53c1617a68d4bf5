# screenshooter/domain/models/job_events.py
"""
Lifecycle events emitted by background jobs.

A job emits any number of InfoMessage / AskForInput events, at most one
terminal event (ImageUploaded or JobError) and exactly one Finished, always
last. A job that was cancelled before doing any work emits only Finished.
"""
import queue
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from screenshooter.domain.common.errors import DomainError


class JobState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    CANCELLED = "cancelled"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobEvent:
    """Base class for job lifecycle events."""
    is_terminal = False


@dataclass(frozen=True)
class InfoMessage(JobEvent):
    text: str


@dataclass(frozen=True)
class ImageUploaded(JobEvent):
    """The upload succeeded. identifier is None when the response carried none."""
    identifier: Optional[str]
    is_terminal = True


@dataclass(frozen=True)
class JobError(JobEvent):
    error: DomainError
    is_terminal = True

    @property
    def message(self) -> str:
        return self.error.message


@dataclass(frozen=True)
class Finished(JobEvent):
    state: JobState


@dataclass(frozen=True, eq=False)
class AskForInput(JobEvent):
    """
    A question from the job to the user.

    The job's worker thread blocks until a listener calls reply() or its
    wait times out. Only the first reply counts.
    """
    prompt: str
    _replies: queue.Queue = field(default_factory=lambda: queue.Queue(maxsize=1), repr=False)

    def reply(self, answer: Optional[str]) -> bool:
        try:
            self._replies.put_nowait(answer)
            return True
        except queue.Full:
            return False

    def wait_for_reply(self, timeout: Optional[float] = None) -> Optional[str]:
        try:
            return self._replies.get(timeout=timeout)
        except queue.Empty:
            return None
