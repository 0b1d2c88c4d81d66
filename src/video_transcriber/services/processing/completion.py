from __future__ import annotations

import logging
from typing import Awaitable, Callable, Set

from src.video_transcriber.domain.models.processing_job import JobStatus, ProcessingJob

logger = logging.getLogger("processing")


class CompletionReaction:
    """Fires a callback once per transition of a job into ``completed``.

    Observing an already-completed status again is a no-op. Within one
    submission a conversation is reacted to at most once; :meth:`reset` starts
    a fresh submission, even if the service hands back the same ids.
    """

    def __init__(self, on_completed: Callable[[ProcessingJob], Awaitable[None]]) -> None:
        self._on_completed = on_completed
        self._fired: Set[str] = set()

    def reset(self) -> None:
        self._fired.clear()

    async def on_transition(self, previous: str, current: str, job: ProcessingJob) -> bool:
        if current != JobStatus.COMPLETED.value or previous == JobStatus.COMPLETED.value:
            return False
        if not job.conversation_id:
            logger.error("Job %s completed without a conversation id", job.job_id)
            return False
        if job.conversation_id in self._fired:
            return False

        self._fired.add(job.conversation_id)
        logger.info("Job %s completed; fetching transcript", job.job_id)
        await self._on_completed(job)
        return True
