from __future__ import annotations

from typing import Optional


class ProcessingError(Exception):
    """Base class for failures talking to the remote processing service.

    ``kind`` distinguishes the failure families for logging and audit events.
    """

    kind = "processing"

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubmissionFailure(ProcessingError):
    """Uploading the media file failed; the job never entered polling."""

    kind = "submission"


class SubmissionRejected(SubmissionFailure):
    """A submission is already in flight for this session."""


class PollFailure(ProcessingError):
    """A single status query failed. Never fatal; the next tick retries."""

    kind = "poll"


class FetchFailure(ProcessingError):
    """Retrieving the transcript failed; previous messages are kept."""

    kind = "fetch"


class AuthenticationFailure(ProcessingError):
    kind = "auth"


class TranscriptNotReady(FetchFailure):
    """The current job has not completed, so there is nothing to fetch."""
