from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from src.video_transcriber.config import settings
from src.video_transcriber.dependencies import get_processing_session
from src.video_transcriber.errors import (
    AuthenticationFailure,
    FetchFailure,
    SubmissionFailure,
    SubmissionRejected,
    TranscriptNotReady,
)
from src.video_transcriber.services.processing.service import ProcessingSession

router = APIRouter(prefix="/processing", tags=["processing"])


class JobSnapshot(BaseModel):
    job_id: Optional[str] = None
    conversation_id: Optional[str] = None
    status: str
    display_status: str
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    submitting: bool
    polling: bool
    message_count: int
    last_error: Optional[str] = None


class MessagesResponse(BaseModel):
    messages: List[Dict[str, Any]]


def _messages_payload(session: ProcessingSession) -> MessagesResponse:
    return MessagesResponse(messages=[m.model_dump(mode="json", by_alias=True) for m in session.messages])


@router.post("/upload", response_model=JobSnapshot, status_code=status.HTTP_202_ACCEPTED)
async def upload_media(
    file: UploadFile = File(...),
    session: ProcessingSession = Depends(get_processing_session),
) -> JobSnapshot:
    """Submit an uploaded audio or video file for processing.

    Returns the job in progress; clients should poll ``/processing/job``
    until its status is terminal, then read ``/processing/messages``.
    """

    content_type = file.content_type or settings.default_media_type
    if not (content_type.startswith("audio/") or content_type.startswith("video/")):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type; expected audio/* or video/*.",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file too large.",
        )

    try:
        await session.submit(content, content_type)
    except SubmissionRejected as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except AuthenticationFailure as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except SubmissionFailure as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return JobSnapshot(**session.snapshot())


@router.get("/job", response_model=JobSnapshot)
async def get_job(session: ProcessingSession = Depends(get_processing_session)) -> JobSnapshot:
    return JobSnapshot(**session.snapshot())


@router.get("/messages", response_model=MessagesResponse)
async def get_messages(session: ProcessingSession = Depends(get_processing_session)) -> MessagesResponse:
    """Return the most recently fetched transcript, in service order."""
    return _messages_payload(session)


@router.post("/messages/refresh", response_model=MessagesResponse)
async def refresh_messages(session: ProcessingSession = Depends(get_processing_session)) -> MessagesResponse:
    try:
        await session.refresh_messages()
    except TranscriptNotReady as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except AuthenticationFailure as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except FetchFailure as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _messages_payload(session)
