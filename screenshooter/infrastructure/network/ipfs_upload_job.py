# screenshooter/infrastructure/network/ipfs_upload_job.py
"""
Background job uploading a screenshot to the IPFS transport endpoint.

The POST is synchronous and cannot be interrupted once started; cancellation
is honoured only up to the moment the request is sent.
"""
import json
import mmap
import os
from typing import Dict, Optional

import requests

from screenshooter.domain.services.i_background_task_service import Job
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.models.job_events import ImageUploaded, JobEvent
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import (
    HttpError, JobCancelledError, MalformedResponseError, NetworkError, SourceUnreadableError
)
from screenshooter.infrastructure.config.json_config_repository import (
    DEFAULT_UPLOAD_TIMEOUT, DEFAULT_UPLOAD_URL
)

UPLOADING_MESSAGE = "Upload the screenshot..."

# Field values are sent literally
FORM_FIELDS = (("name", "keyphrase"), ("name", "user"))


def proxies_from_environment(environ: Optional[Dict[str, str]] = None) -> Optional[Dict[str, str]]:
    """Proxy mapping for requests built from $http_proxy, or None when unset or empty."""
    environ = os.environ if environ is None else environ
    proxy = environ.get("http_proxy")
    if not proxy:
        return None
    return {"http": proxy, "https": proxy}


def parse_identifier(body: str, logger: ILoggerService) -> Optional[str]:
    """
    Extract the "Hash" string from a JSON object body.

    Anything unexpected yields None instead of an error; the upload itself
    has already succeeded at that point.
    """
    try:
        document = json.loads(body)
    except ValueError as e:
        logger.warning(str(MalformedResponseError(f"Upload response is not JSON: {e}", inner_error=e)))
        return None

    if not isinstance(document, dict):
        logger.warning(str(MalformedResponseError("Upload response is not a JSON object")))
        return None

    identifier = document.get("Hash")
    if not isinstance(identifier, str):
        logger.warning(str(MalformedResponseError(
            "Upload response has no string \"Hash\" member",
            details={"keys": sorted(document.keys())}
        )))
        return None
    return identifier


class IpfsUploadJob(Job[Optional[str]]):
    """
    Uploads one image file and reports its content identifier.

    Emits an InfoMessage before the network call, then ImageUploaded or
    JobError, then Finished.
    """

    job_type = "ipfs-upload"

    def __init__(self, source_path: str, title: str, logger: ILoggerService,
                 upload_url: str = DEFAULT_UPLOAD_URL,
                 timeout: float = DEFAULT_UPLOAD_TIMEOUT):
        super().__init__(logger)
        self.source_path = source_path
        self.title = title
        self.upload_url = upload_url
        self.timeout = timeout

    def success_event(self, value: Optional[str]) -> JobEvent:
        return ImageUploaded(value)

    def execute(self) -> Result[Optional[str]]:
        try:
            source = open(self.source_path, "rb")
        except OSError as e:
            return self._unreadable(e)

        with source:
            try:
                mapping = mmap.mmap(source.fileno(), 0, access=mmap.ACCESS_READ)
            except (OSError, ValueError) as e:
                # ValueError: empty files cannot be mapped
                return self._unreadable(e)

            with mapping:
                return self._post(mapping)

    def _post(self, mapping: mmap.mmap) -> Result[Optional[str]]:
        files = [(field, (None, value)) for field, value in FORM_FIELDS]
        files.append(("file", (os.path.basename(self.source_path), mapping, "image/png")))

        with requests.Session() as session:
            proxies = proxies_from_environment()
            if proxies:
                self.logger.debug(f"Uploading through proxy {proxies['http']}")

            if self.cancel_requested:
                return Result.fail(JobCancelledError("Upload cancelled before sending"))

            self.report_info(UPLOADING_MESSAGE)
            self.logger.info(f"Uploading {self.source_path} to {self.upload_url}", title=self.title)

            try:
                response = session.post(self.upload_url, files=files, proxies=proxies,
                                        timeout=self.timeout)
            except requests.RequestException as e:
                self.logger.error(f"Error during the POST exchange: {e}")
                return Result.fail(NetworkError(
                    message=f"An error occurred while transferring the data to IPFS: {e}",
                    details={"url": self.upload_url},
                    inner_error=e
                ))

        if not 200 <= response.status_code < 300:
            self.logger.error(f"Error during the POST exchange: {response.status_code} {response.reason}")
            return Result.fail(HttpError(
                status_code=response.status_code,
                reason=response.reason or "",
                details={"url": self.upload_url}
            ))

        identifier = parse_identifier(response.text, self.logger)
        self.logger.info("Upload finished", identifier=identifier)
        return Result.ok(identifier)

    def _unreadable(self, error: Exception) -> Result[Optional[str]]:
        self.logger.error(f"Cannot read {self.source_path}: {error}")
        return Result.fail(SourceUnreadableError(
            message=f"Cannot read the screenshot file {self.source_path}",
            details={"path": self.source_path},
            inner_error=error
        ))
