from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from src.video_transcriber.config import settings
from src.video_transcriber.domain.models.processing_job import JobStatus, ProcessingJob
from src.video_transcriber.domain.models.transcript import TranscriptMessage
from src.video_transcriber.errors import (
    AuthenticationFailure,
    FetchFailure,
    SubmissionFailure,
    SubmissionRejected,
    TranscriptNotReady,
)
from src.video_transcriber.infra.symbl.client import SymblClient
from src.video_transcriber.services.audit.service import audit_service
from src.video_transcriber.services.auth.credentials import CredentialHolder
from src.video_transcriber.services.processing.completion import CompletionReaction
from src.video_transcriber.services.processing.poller import JobStatusPoller
from src.video_transcriber.services.processing.submission import JobSubmitter
from src.video_transcriber.services.processing.transcripts import TranscriptFetcher

logger = logging.getLogger("processing")


class ProcessingSession:
    """Orchestrates one client's job from upload to transcript.

    The session is the only writer of job and message state. Flow:

    1. :meth:`submit` uploads the media and marks the job in progress.
    2. The poller queries the job status on a fixed interval.
    3. On the transition into ``completed`` the transcript is fetched once.

    A new submission replaces the job; the previous transcript stays visible
    until the new job's transcript has been fetched.
    """

    def __init__(
        self,
        client: SymblClient,
        credentials: CredentialHolder,
        *,
        poll_interval_ms: Optional[int] = None,
        terminal_statuses: Optional[Iterable[str]] = None,
        default_media_type: Optional[str] = None,
    ) -> None:
        self._credentials = credentials
        self._default_media_type = default_media_type or settings.default_media_type
        self._submitting = False
        self._transcript_ready = asyncio.Event()

        self.job = ProcessingJob()
        self.messages: List[TranscriptMessage] = []
        self.last_error: Optional[str] = None

        self._submitter = JobSubmitter(client)
        self._fetcher = TranscriptFetcher(client)
        self._reaction = CompletionReaction(self._load_transcript)
        self._poller = JobStatusPoller(
            client,
            get_job=lambda: self.job,
            get_token=credentials.require_token,
            on_status=self._apply_polled_status,
            interval_ms=poll_interval_ms if poll_interval_ms is not None else settings.poll_interval_ms,
            terminal_statuses=terminal_statuses if terminal_statuses is not None else settings.terminal_statuses,
        )

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def polling(self) -> bool:
        return self._poller.active

    async def submit(self, payload: bytes, content_type: Optional[str] = None) -> ProcessingJob:
        """Upload media and start polling the resulting job.

        Raises ``SubmissionRejected`` while another submission is in flight,
        and ``SubmissionFailure`` if the upload fails; in that case the job
        stays ``not_started`` and no poll is ever issued for it.
        """

        if self._submitting:
            raise SubmissionRejected("A submission is already in flight")
        if not payload:
            raise ValueError("Cannot submit an empty media payload")
        token = self._credentials.require_token()

        self._submitting = True
        try:
            self._poller.stop()
            self.job = ProcessingJob()
            self._reaction.reset()
            self.last_error = None
            self._transcript_ready.clear()
            try:
                job = await self._submitter.submit(payload, token, content_type or self._default_media_type)
            except SubmissionFailure as exc:
                self.last_error = str(exc)
                logger.error("Submission failed: %s", exc)
                audit_service.log_event(
                    action="submit_failed",
                    resource_type="processing_job",
                    extra={"failure": exc.kind, "status_code": exc.status_code},
                )
                raise
            self.job = job
        finally:
            self._submitting = False

        logger.info("Job %s submitted (conversation %s)", job.job_id, job.conversation_id)
        audit_service.log_event(
            action="submit_job",
            resource_type="processing_job",
            resource_id=job.job_id,
            extra={"conversation_id": job.conversation_id, "size_bytes": len(payload)},
        )
        self._poller.start()
        return job

    async def refresh_messages(self) -> List[TranscriptMessage]:
        """Fetch the transcript again for the completed job.

        Errors are surfaced to the caller; the current messages are kept.
        """

        if self.job.status != JobStatus.COMPLETED.value or not self.job.conversation_id:
            raise TranscriptNotReady("The current job has not completed")
        try:
            return await self._fetch(self.job.conversation_id)
        except (FetchFailure, AuthenticationFailure) as exc:
            self._record_fetch_failure(self.job.conversation_id, exc)
            raise

    async def wait_for_transcript(self, timeout: Optional[float] = None) -> List[TranscriptMessage]:
        await asyncio.wait_for(self._transcript_ready.wait(), timeout)
        return self.messages

    def snapshot(self) -> Dict[str, Any]:
        return {
            "job_id": self.job.job_id,
            "conversation_id": self.job.conversation_id,
            "status": self.job.status,
            "display_status": self.job.display_status,
            "submitted_at": self.job.submitted_at,
            "updated_at": self.job.updated_at,
            "submitting": self._submitting,
            "polling": self.polling,
            "message_count": len(self.messages),
            "last_error": self.last_error,
        }

    async def aclose(self) -> None:
        self._poller.stop()

    async def _apply_polled_status(self, job_id: str, status: str) -> None:
        if job_id != self.job.job_id:
            logger.info("Discarding status %r for superseded job %s", status, job_id)
            return
        await self._transition(status)

    async def _transition(self, status: str) -> None:
        previous = self.job.status
        self.job.status = status
        self.job.updated_at = datetime.now(timezone.utc)

        if previous != status:
            logger.info("Job %s: %s -> %s", self.job.job_id, previous, status)
            audit_service.log_event(
                action="status_change",
                resource_type="processing_job",
                resource_id=self.job.job_id,
                extra={"from": previous, "to": status},
            )

        await self._reaction.on_transition(previous, status, self.job)

    async def _load_transcript(self, job: ProcessingJob) -> None:
        try:
            await self._fetch(job.conversation_id)
        except (FetchFailure, AuthenticationFailure) as exc:
            self._record_fetch_failure(job.conversation_id, exc)

    async def _fetch(self, conversation_id: str) -> List[TranscriptMessage]:
        messages = await self._fetcher.fetch(conversation_id, self._credentials.require_token())
        if conversation_id != self.job.conversation_id:
            logger.info("Discarding transcript for superseded conversation %s", conversation_id)
            return self.messages

        self.messages = messages
        self.last_error = None
        self._transcript_ready.set()
        audit_service.log_event(
            action="transcript_fetched",
            resource_type="transcript",
            resource_id=conversation_id,
            extra={"message_count": len(messages)},
        )
        return messages

    def _record_fetch_failure(self, conversation_id: Optional[str], exc: Exception) -> None:
        self.last_error = str(exc)
        logger.error("Transcript fetch for conversation %s failed: %s", conversation_id, exc)
        audit_service.log_event(
            action="fetch_failed",
            resource_type="transcript",
            resource_id=conversation_id,
            extra={"failure": getattr(exc, "kind", "fetch")},
        )
