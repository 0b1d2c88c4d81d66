from __future__ import annotations

import logging
from typing import Optional

from src.video_transcriber.config import settings
from src.video_transcriber.errors import AuthenticationFailure
from src.video_transcriber.infra.symbl.client import SymblClient
from src.video_transcriber.services.auth.credentials import CredentialHolder
from src.video_transcriber.services.processing.service import ProcessingSession

logger = logging.getLogger("processing")

_client: Optional[SymblClient] = None
_session: Optional[ProcessingSession] = None
_credentials = CredentialHolder()


def get_symbl_client() -> SymblClient:
    """Return the process-wide client, creating it on first use."""

    global _client
    if _client is None:
        _client = SymblClient()
    return _client


def get_credential_holder() -> CredentialHolder:
    return _credentials


def get_processing_session() -> ProcessingSession:
    """Return the single processing session.

    One job per client: a new upload replaces the session's job rather than
    creating a second one.
    """

    global _session
    if _session is None:
        _session = ProcessingSession(get_symbl_client(), _credentials)
    return _session


async def init_credentials() -> None:
    """Log in with SYMBL_APP_ID/SYMBL_APP_SECRET when both are configured.

    Failures are logged; clients can still log in via the auth endpoint.
    """

    if not settings.app_id or not settings.app_secret:
        return
    try:
        await _credentials.login(get_symbl_client(), settings.app_id, settings.app_secret)
    except AuthenticationFailure:
        logger.exception("Startup login with configured app credentials failed")


async def shutdown() -> None:
    global _client, _session
    if _session is not None:
        await _session.aclose()
        _session = None
    if _client is not None:
        await _client.aclose()
        _client = None
