# ssrportal/client/upload_coordinator.py
"""
Turns locally selected files into durable URLs via ``POST /api/upload``.

Files go up one at a time. A failed attempt n (of max_attempts) is followed
by a blocking sleep of ``n * backoff_unit`` seconds; no sleep after the last
one. Every failure is retried, including 4xx answers.
"""
import io
import logging
import mimetypes
import os
import time
from collections import namedtuple
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import requests

from ssrportal.client.http import PortalRequestError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_BACKOFF_UNIT = 2.0

# category key -> label shown to the user
REQUIRED_CATEGORIES = (
    ("report", "Report"),
    ("poster", "Poster"),
    ("ppt", "PPT"),
)

AttemptRecord = namedtuple("AttemptRecord", ["attempt", "ok", "error", "delay_after"])


@dataclass(frozen=True)
class LocalFile:
    """A file picked for upload, either on disk (``path``) or in memory (``data``)."""
    filename: str
    content_type: Optional[str] = None
    path: Optional[str] = None
    data: Optional[bytes] = None

    @classmethod
    def from_path(cls, path, content_type=None):
        guessed, _ = mimetypes.guess_type(path)
        return cls(filename=os.path.basename(path), content_type=content_type or guessed or "application/octet-stream",
                   path=path)

    def open(self):
        if self.data is not None:
            return io.BytesIO(self.data)
        return open(self.path, "rb")


@dataclass
class UploadResult:
    file: LocalFile
    url: str
    response: Dict
    attempts: List[AttemptRecord] = field(default_factory=list)


class UploadError(Exception):

    def __init__(self, filename, attempts, cause, completed=None):
        self.filename = filename
        self.attempts = list(attempts)
        self.cause = cause
        # results for files that made it before this one, in order
        self.completed = list(completed or [])
        super().__init__(
            f"Failed to upload {filename} after {len(self.attempts)} attempts. {cause} "
            f"Please check your internet connection and try again."
        )


class SubmissionGateError(Exception):

    def __init__(self, missing):
        self.missing = list(missing)
        labels = dict(REQUIRED_CATEGORIES)
        names = ", ".join(labels.get(c, c) for c in self.missing)
        super().__init__(f"Please upload the following required files: {names}")


def _has_reference(value):
    if isinstance(value, (list, tuple)):
        return any(v for v in value)
    return bool(value and str(value).strip(","))


def check_required_categories(selected, existing=None, required=None):
    """
    Refuse a submission when a required category has neither newly selected
    files nor an already persisted reference. Makes no network calls.
    """
    existing = existing or {}
    required = required or [key for key, _ in REQUIRED_CATEGORIES]
    missing = [c for c in required if not selected.get(c) and not _has_reference(existing.get(c))]
    if missing:
        raise SubmissionGateError(missing)


class UploadCoordinator:

    def __init__(self, client, backoff_unit=DEFAULT_BACKOFF_UNIT, max_attempts=DEFAULT_MAX_ATTEMPTS,
                 sleep=time.sleep):
        self.client = client
        self.backoff_unit = backoff_unit
        self.max_attempts = max_attempts
        self._sleep = sleep

    def upload_one(self, local_file, max_attempts=None):
        if max_attempts is None:
            max_attempts = self.max_attempts
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        attempts = []
        cause = None
        for n in range(1, max_attempts + 1):
            try:
                response = self.client.upload(local_file)
            except (PortalRequestError, requests.exceptions.RequestException, OSError) as e:
                cause = e
                delay = n * self.backoff_unit if n < max_attempts else 0
                attempts.append(AttemptRecord(n, False, str(e), delay))
                logger.warning(f"Upload attempt {n}/{max_attempts} for {local_file.filename} failed: {e}")
                if delay:
                    self._sleep(delay)
                continue

            attempts.append(AttemptRecord(n, True, None, 0))
            logger.info(f"Uploaded {local_file.filename} on attempt {n}")
            return UploadResult(local_file, response["url"], response, attempts)

        raise UploadError(local_file.filename, attempts, cause)

    def upload_many(self, files: Iterable[LocalFile], max_attempts=None):
        """Upload in order; the first file that exhausts its attempts aborts the rest."""
        results = []
        for f in files:
            try:
                results.append(self.upload_one(f, max_attempts))
            except UploadError as e:
                e.completed = results
                raise
        return results
