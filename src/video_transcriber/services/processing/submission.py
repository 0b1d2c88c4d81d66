from __future__ import annotations

import logging
from datetime import datetime, timezone

from src.video_transcriber.domain.models.processing_job import JobStatus, ProcessingJob
from src.video_transcriber.infra.symbl.client import SymblClient

logger = logging.getLogger("processing")


class JobSubmitter:
    """Uploads media to the processing endpoint and builds the resulting job."""

    def __init__(self, client: SymblClient) -> None:
        self._client = client

    async def submit(self, payload: bytes, token: str, content_type: str) -> ProcessingJob:
        """Submit ``payload`` and return an in-progress job.

        Raises ``SubmissionFailure`` if the upload fails; no job is created in
        that case.
        """

        logger.info("Submitting %d bytes of %s for processing", len(payload), content_type)
        submitted = await self._client.submit_media(payload, token, content_type)

        now = datetime.now(timezone.utc)
        return ProcessingJob(
            job_id=submitted.job_id,
            conversation_id=submitted.conversation_id,
            status=JobStatus.IN_PROGRESS.value,
            submitted_at=now,
            updated_at=now,
        )
