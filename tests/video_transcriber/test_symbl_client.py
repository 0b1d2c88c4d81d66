from datetime import datetime, timezone

import httpx
import pytest

from src.video_transcriber.errors import AuthenticationFailure, FetchFailure, PollFailure, SubmissionFailure
from src.video_transcriber.infra.symbl.client import SymblClient, SymblConfig


async def test_submit_media_sends_payload_with_credential(symbl_client, fake_api):
    submitted = await symbl_client.submit_media(b"video-bytes", "token-123", "video/mp4")

    assert submitted.job_id == "j1"
    assert submitted.conversation_id == "c1"

    request = fake_api.requests[-1]
    assert request.method == "POST"
    assert request.url.path == "/v1/process/video"
    assert request.headers["x-api-key"] == "token-123"
    assert request.headers["content-type"] == "video/mp4"
    assert request.content == b"video-bytes"


async def test_audio_uploads_use_audio_endpoint(symbl_client, fake_api):
    await symbl_client.submit_media(b"audio-bytes", "token-123", "audio/wav")

    assert fake_api.requests[-1].url.path == "/v1/process/audio"


async def test_submit_media_raises_on_error_status(symbl_client, fake_api):
    fake_api.submit_error = 500

    with pytest.raises(SubmissionFailure) as excinfo:
        await symbl_client.submit_media(b"video-bytes", "token-123", "video/mp4")

    assert excinfo.value.status_code == 500
    assert excinfo.value.kind == "submission"


async def test_submit_media_raises_on_network_error(symbl_client, fake_api):
    fake_api.submit_network_error = True

    with pytest.raises(SubmissionFailure):
        await symbl_client.submit_media(b"video-bytes", "token-123", "video/mp4")


async def test_submit_media_requires_both_identifiers(symbl_client, fake_api):
    fake_api.submit_response = {"jobId": "j1"}

    with pytest.raises(SubmissionFailure):
        await symbl_client.submit_media(b"video-bytes", "token-123", "video/mp4")


async def test_get_job_status(symbl_client, fake_api):
    fake_api.statuses = ["in_progress"]

    status = await symbl_client.get_job_status("j1", "token-123")

    assert status == "in_progress"
    assert fake_api.requests[-1].url.path == "/v1/job/j1"
    assert fake_api.requests[-1].headers["x-api-key"] == "token-123"


async def test_get_job_status_raises_poll_failure(symbl_client, fake_api):
    fake_api.statuses = [503]

    with pytest.raises(PollFailure):
        await symbl_client.get_job_status("j1", "token-123")


async def test_get_messages_preserves_service_order(symbl_client, fake_api):
    fake_api.messages = [
        {"text": "second", "startTime": "2021-07-21T10:15:35.000Z"},
        {"text": "first", "startTime": "2021-07-21T10:15:30.000Z", "from": {"name": "Ann"}},
    ]

    messages = await symbl_client.get_messages("c1", "token-123")

    assert [m.text for m in messages] == ["second", "first"]
    assert messages[0].start_time == "2021-07-21T10:15:35.000Z"
    assert messages[0].started_at == datetime(2021, 7, 21, 10, 15, 35, tzinfo=timezone.utc)
    assert fake_api.requests[-1].url.path == "/v1/conversations/c1/messages"


async def test_get_messages_raises_fetch_failure(symbl_client, fake_api):
    fake_api.messages_error = 404

    with pytest.raises(FetchFailure):
        await symbl_client.get_messages("c1", "token-123")


async def test_generate_token(symbl_client, fake_api):
    token = await symbl_client.generate_token("app", "secret")

    assert token == "token-123"
    request = fake_api.requests[-1]
    assert request.url.path == "/oauth2/token:generate"
    assert "x-api-key" not in request.headers


async def test_generate_token_requires_access_token():
    def handler(request):
        return httpx.Response(200, json={"expiresIn": 10})

    client = SymblClient(
        SymblConfig(base_url="https://api.test", timeout_seconds=5),
        transport=httpx.MockTransport(handler),
    )
    try:
        with pytest.raises(AuthenticationFailure):
            await client.generate_token("app", "secret")
    finally:
        await client.aclose()
