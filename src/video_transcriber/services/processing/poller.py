from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, Optional

from src.video_transcriber.domain.models.processing_job import JobStatus, ProcessingJob
from src.video_transcriber.errors import ProcessingError
from src.video_transcriber.infra.symbl.client import SymblClient
from src.video_transcriber.services.audit.service import audit_service
from src.video_transcriber.services.scheduling.interval import IntervalScheduler

logger = logging.getLogger("processing")

StatusCallback = Callable[[str, str], Awaitable[None]]


class JobStatusPoller:
    """Queries a job's status on a fixed interval until it is terminal.

    The poller owns its timer: :meth:`start` is called once a job id exists
    and the timer ends itself once :meth:`should_stop` holds. Failed queries
    are logged and skipped; the next tick is the retry.
    """

    def __init__(
        self,
        client: SymblClient,
        *,
        get_job: Callable[[], ProcessingJob],
        get_token: Callable[[], str],
        on_status: StatusCallback,
        interval_ms: int,
        terminal_statuses: Iterable[str] = (JobStatus.COMPLETED.value,),
        scheduler: Optional[IntervalScheduler] = None,
    ) -> None:
        self._client = client
        self._get_job = get_job
        self._get_token = get_token
        self._on_status = on_status
        self._interval_ms = interval_ms
        self._terminal_statuses = frozenset(s.lower() for s in terminal_statuses)
        self._scheduler = scheduler or IntervalScheduler()

    @property
    def active(self) -> bool:
        return self._scheduler.active

    def should_stop(self) -> bool:
        job = self._get_job()
        status = job.status
        if status == JobStatus.COMPLETED.value:
            return True
        # Status moved past not_started without a job id: inconsistent state.
        if status != JobStatus.NOT_STARTED.value and not job.job_id:
            return True
        return status.lower() in self._terminal_statuses

    def start(self) -> bool:
        """Start polling the current job. Returns whether a timer is running."""

        job = self._get_job()
        if not job.job_id:
            logger.debug("Not starting poller: no job id yet")
            self._scheduler.cancel()
            return False
        handle = self._scheduler.schedule(self.tick, self._interval_ms, self.should_stop)
        if handle.active:
            logger.info("Polling job %s every %d ms", job.job_id, self._interval_ms)
        return handle.active

    def stop(self) -> None:
        self._scheduler.cancel()

    async def tick(self) -> None:
        job_id = self._get_job().job_id
        if not job_id:
            return

        try:
            status = await self._client.get_job_status(job_id, self._get_token())
        except ProcessingError as exc:
            logger.warning("Status poll for job %s failed: %s", job_id, exc)
            audit_service.log_event(
                action="poll_failed",
                resource_type="processing_job",
                resource_id=job_id,
                extra={"failure": exc.kind},
            )
            return

        await self._on_status(job_id, status)
