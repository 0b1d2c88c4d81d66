from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import ValidationError

from src.video_transcriber.config import settings
from src.video_transcriber.domain.models.processing_job import SubmittedJob
from src.video_transcriber.domain.models.transcript import TranscriptMessage
from src.video_transcriber.errors import (
    AuthenticationFailure,
    FetchFailure,
    PollFailure,
    ProcessingError,
    SubmissionFailure,
)


logger = logging.getLogger("symbl")


@dataclass
class SymblConfig:
    """Connection settings for the remote processing service."""

    base_url: str
    timeout_seconds: float

    @classmethod
    def from_settings(cls) -> "SymblConfig":
        return cls(
            base_url=settings.api_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )


class SymblClient:
    """Small async REST client for the asynchronous processing API.

    Every authenticated call takes the access token explicitly; the client
    holds no credential state of its own. Each operation raises the failure
    type of its family (submission, poll, fetch, auth) so callers can decide
    which failures are fatal to them.
    """

    def __init__(
        self,
        config: Optional[SymblConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or SymblConfig.from_settings()
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        failure: Type[ProcessingError],
        token: Optional[str] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        headers = dict(kwargs.pop("headers", None) or {})
        if token is not None:
            headers["x-api-key"] = token

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise failure(f"{method} {path} failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "%s %s failed with status %s: %s",
                method,
                path,
                response.status_code,
                response.text,
            )
            raise failure(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("%s %s returned non-JSON response", method, path)
            raise failure(f"{method} {path} returned non-JSON response") from exc

        if not isinstance(data, dict):
            raise failure(f"{method} {path} returned unexpected payload")
        return data

    async def generate_token(self, app_id: str, app_secret: str) -> str:
        """Exchange application credentials for an access token."""

        data = await self._request(
            "POST",
            "/oauth2/token:generate",
            failure=AuthenticationFailure,
            json={"type": "application", "appId": app_id, "appSecret": app_secret},
        )
        token = data.get("accessToken")
        if not token:
            raise AuthenticationFailure("Token response did not include an accessToken")
        return token

    async def submit_media(self, payload: bytes, token: str, content_type: str) -> SubmittedJob:
        """Upload raw media bytes and return the job/conversation identifiers.

        Audio uploads go to the audio endpoint; everything else is treated as
        video, which the service also accepts for audio-only containers.
        """

        kind = "audio" if content_type.startswith("audio/") else "video"
        data = await self._request(
            "POST",
            f"/v1/process/{kind}",
            failure=SubmissionFailure,
            token=token,
            content=payload,
            headers={"Content-Type": content_type},
        )
        try:
            return SubmittedJob.model_validate(data)
        except ValidationError as exc:
            raise SubmissionFailure("Submit response is missing jobId or conversationId") from exc

    async def get_job_status(self, job_id: str, token: str) -> str:
        data = await self._request("GET", f"/v1/job/{job_id}", failure=PollFailure, token=token)
        status = data.get("status")
        if not isinstance(status, str) or not status:
            raise PollFailure(f"Status response for job {job_id} has no status")
        return status

    async def get_messages(self, conversation_id: str, token: str) -> List[TranscriptMessage]:
        data = await self._request(
            "GET",
            f"/v1/conversations/{conversation_id}/messages",
            failure=FetchFailure,
            token=token,
        )
        raw_messages = data.get("messages")
        if not isinstance(raw_messages, list):
            raise FetchFailure(f"Messages response for conversation {conversation_id} has no messages")
        try:
            return [TranscriptMessage.model_validate(m) for m in raw_messages]
        except ValidationError as exc:
            raise FetchFailure("Messages response contained malformed entries") from exc
