# screenshooter/infrastructure/storage/filename_allocator.py
"""
Generates Screenshot.png / Screenshot-<n>.png names that do not collide with
existing files.

The existence probe and the later write are not atomic: another process can
create the same name in between. Two allocators racing on one directory can
also hand out the same name.
"""
import itertools
import os
from typing import Optional

from screenshooter.domain.services.i_screenshot_save_service import IFilenameAllocator
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import ValidationError

BASE_NAME = "Screenshot"
EXTENSION = ".png"


class FilenameAllocator(IFilenameAllocator):

    def __init__(self, logger: ILoggerService):
        self.logger = logger

    def allocate(self, directory: Optional[str]) -> Result[str]:
        if not directory:
            return Result.fail(ValidationError(
                message="No directory given to generate a screenshot filename in",
                details={"directory": directory}
            ))

        candidate = f"{BASE_NAME}{EXTENSION}"
        if not os.path.exists(os.path.join(directory, candidate)):
            return Result.ok(candidate)

        # Stops at the first free index
        for index in itertools.count(1):
            candidate = f"{BASE_NAME}-{index}{EXTENSION}"
            if not os.path.exists(os.path.join(directory, candidate)):
                self.logger.debug(f"Allocated filename {candidate}", directory=directory)
                return Result.ok(candidate)
