# screenshooter/domain/services/i_upload_service.py
from abc import ABC, abstractmethod

from screenshooter.domain.common.result import Result
from screenshooter.domain.services.i_background_task_service import JobHandle


class IUploadService(ABC):
    """User-facing upload action."""

    @abstractmethod
    def upload_screenshot(self, image_path: str, title: str = "") -> Result[JobHandle]:
        """
        Upload an image file in the background, reporting progress and the
        outcome through the UI.

        Args:
            image_path: Local image file. Must stay in place until the job finishes.
            title: Display label for the upload
        """
        pass
