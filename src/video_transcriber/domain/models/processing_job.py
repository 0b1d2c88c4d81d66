from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobStatus(str, Enum):
    NOT_STARTED = "not_started"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingJob(BaseModel):
    """One media-processing request tracked against the remote service.

    ``status`` is a plain string because the remote service is authoritative
    and may report values outside :class:`JobStatus`.
    """

    job_id: Optional[str] = None
    conversation_id: Optional[str] = None  # Keys the transcript fetch
    status: str = JobStatus.NOT_STARTED.value
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _ids_assigned_together(self) -> "ProcessingJob":
        if (self.job_id is None) != (self.conversation_id is None):
            raise ValueError("job_id and conversation_id must be assigned together")
        return self

    @property
    def display_status(self) -> str:
        if self.status == JobStatus.NOT_STARTED.value:
            return ""
        if self.status == JobStatus.IN_PROGRESS.value:
            return "processing"
        return self.status


class SubmittedJob(BaseModel):
    """Identifiers returned by the remote service for an accepted upload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    job_id: str = Field(alias="jobId", min_length=1)
    conversation_id: str = Field(alias="conversationId", min_length=1)
