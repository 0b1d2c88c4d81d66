from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.video_transcriber.dependencies import get_credential_holder, get_symbl_client
from src.video_transcriber.errors import AuthenticationFailure
from src.video_transcriber.infra.symbl.client import SymblClient
from src.video_transcriber.services.auth.credentials import CredentialHolder

router = APIRouter(prefix="/auth", tags=["auth"])


class TokenRequest(BaseModel):
    app_id: str
    app_secret: str


class AuthStatusResponse(BaseModel):
    authenticated: bool


@router.post("/token", response_model=AuthStatusResponse)
async def generate_token(
    request: TokenRequest,
    credentials: CredentialHolder = Depends(get_credential_holder),
    client: SymblClient = Depends(get_symbl_client),
) -> AuthStatusResponse:
    """Exchange application credentials for an access token.

    The token is kept server-side and used for every processing call; it is
    never returned to the caller.
    """

    try:
        await credentials.login(client, request.app_id, request.app_secret)
    except AuthenticationFailure as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return AuthStatusResponse(authenticated=True)


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(credentials: CredentialHolder = Depends(get_credential_holder)) -> AuthStatusResponse:
    return AuthStatusResponse(authenticated=credentials.is_authenticated)
