from __future__ import annotations

from typing import Optional

from src.video_transcriber.errors import AuthenticationFailure
from src.video_transcriber.infra.symbl.client import SymblClient
from src.video_transcriber.services.audit.service import audit_service


class CredentialHolder:
    """Owns the access token used for every authenticated call.

    Processing components never read the token from here implicitly; the
    session asks for it and passes it into each network operation.
    """

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def set_token(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None

    def require_token(self) -> str:
        if not self._token:
            raise AuthenticationFailure("No access token; log in first")
        return self._token

    async def login(self, client: SymblClient, app_id: str, app_secret: str) -> str:
        """Exchange app credentials for a token and keep it.

        The previous token is left in place if the exchange fails.
        """

        token = await client.generate_token(app_id, app_secret)
        self._token = token
        audit_service.log_event(action="login", resource_type="credentials", extra={"app_id": app_id})
        return token
