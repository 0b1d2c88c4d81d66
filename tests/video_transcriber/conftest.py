import asyncio
from typing import Dict, List, Optional

import httpx
import pytest

from src.video_transcriber.infra.symbl.client import SymblClient, SymblConfig
from src.video_transcriber.services.auth.credentials import CredentialHolder
from src.video_transcriber.services.processing.service import ProcessingSession


class FakeSymblApi:
    """In-process stand-in for the remote processing service.

    Status responses are served from ``statuses`` in order; the last entry
    repeats. Entries that are ints are returned as HTTP error codes.
    """

    def __init__(self) -> None:
        self.statuses: List[object] = ["completed"]
        self.messages: List[Dict[str, object]] = [
            {"id": "m1", "text": "hi", "startTime": "2021-07-21T10:15:30.000Z"},
        ]
        self.submit_response: Dict[str, str] = {"jobId": "j1", "conversationId": "c1"}
        self.submit_error: Optional[int] = None
        self.submit_network_error = False
        self.messages_error: Optional[int] = None
        self.submit_gate: Optional[asyncio.Event] = None
        self.status_gate: Optional[asyncio.Event] = None
        self.messages_gate: Optional[asyncio.Event] = None
        self.status_overrides: Dict[str, str] = {}
        self.requests: List[httpx.Request] = []

    def calls(self, prefix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(prefix)]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/oauth2/token:generate":
            return httpx.Response(200, json={"accessToken": "token-123", "expiresIn": 86400})

        if path.startswith("/v1/process/"):
            if self.submit_gate is not None:
                await self.submit_gate.wait()
            if self.submit_network_error:
                raise httpx.ConnectError("connection refused", request=request)
            if self.submit_error is not None:
                return httpx.Response(self.submit_error, json={"message": "rejected"})
            return httpx.Response(201, json=self.submit_response)

        if path.startswith("/v1/job/"):
            job_id = path.rsplit("/", 1)[-1]
            if self.status_gate is not None:
                await self.status_gate.wait()
            if job_id in self.status_overrides:
                return httpx.Response(200, json={"id": job_id, "status": self.status_overrides[job_id]})
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            if isinstance(status, int):
                return httpx.Response(status, json={"message": "unavailable"})
            return httpx.Response(200, json={"id": job_id, "status": status})

        if path.startswith("/v1/conversations/") and path.endswith("/messages"):
            if self.messages_gate is not None:
                await self.messages_gate.wait()
            if self.messages_error is not None:
                return httpx.Response(self.messages_error, json={"message": "not found"})
            return httpx.Response(200, json={"messages": self.messages})

        return httpx.Response(404, json={"message": "unknown endpoint"})


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met within %.1fs" % timeout)
        await asyncio.sleep(0.001)


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def fake_api() -> FakeSymblApi:
    return FakeSymblApi()


@pytest.fixture
async def symbl_client(fake_api):
    client = SymblClient(
        SymblConfig(base_url="https://api.test", timeout_seconds=5),
        transport=httpx.MockTransport(fake_api.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def credentials() -> CredentialHolder:
    return CredentialHolder(token="token-123")


@pytest.fixture
async def session(symbl_client, credentials):
    processing_session = ProcessingSession(
        symbl_client,
        credentials,
        poll_interval_ms=5,
        terminal_statuses={"completed", "failed"},
        default_media_type="video/mp4",
    )
    yield processing_session
    await processing_session.aclose()
