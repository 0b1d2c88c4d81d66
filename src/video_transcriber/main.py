import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.video_transcriber.api.v1.routes_auth import router as auth_router_v1
from src.video_transcriber.api.v1.routes_processing import router as processing_router_v1
from src.video_transcriber.api.v1.routes_system import router as system_router_v1
from src.video_transcriber.config import settings
from src.video_transcriber.dependencies import init_credentials, shutdown

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(title="Video Processing API")


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook.

    When SYMBL_APP_ID and SYMBL_APP_SECRET are configured this exchanges them
    for an access token up front; otherwise clients log in through
    ``/api/v1/auth/token``.
    """

    await init_credentials()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await shutdown()


# CORS configuration – permissive by default for development. Tighten via
# CORS_ALLOW_ORIGINS in production deployments.
allow_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Basic liveness probe for the API root."""
    return {"status": "ok"}


# Versioned API routers
app.include_router(system_router_v1, prefix="/api/v1")
app.include_router(auth_router_v1, prefix="/api/v1")
app.include_router(processing_router_v1, prefix="/api/v1")
