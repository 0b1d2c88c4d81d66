from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional


def _parse_statuses(raw: str) -> FrozenSet[str]:
    return frozenset(s.strip().lower() for s in raw.split(",") if s.strip())


@dataclass
class Settings:
    """Centralized application settings.

    This keeps environment-variable handling in one place so other modules can
    depend on strongly-typed attributes instead of calling os.getenv
    directly.
    """

    # Base URL of the remote processing service (Symbl-compatible REST API).
    api_base_url: str = os.getenv("SYMBL_API_BASE_URL", "https://api.symbl.ai")

    # Optional application credentials used to exchange for an access token.
    app_id: Optional[str] = os.getenv("SYMBL_APP_ID")
    app_secret: Optional[str] = os.getenv("SYMBL_APP_SECRET")

    # How often a submitted job's status is polled, in milliseconds.
    poll_interval_ms: int = int(os.getenv("POLL_INTERVAL_MS", "1000"))

    # Remote statuses after which polling halts. Only "completed" triggers the
    # transcript fetch; the others simply end the job's lifecycle.
    terminal_statuses: FrozenSet[str] = field(
        default_factory=lambda: _parse_statuses(os.getenv("TERMINAL_JOB_STATUSES", "completed,failed"))
    )

    # Per-request timeout for calls to the remote service.
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "60"))

    # Content type assumed when an upload does not declare one.
    default_media_type: str = os.getenv("DEFAULT_MEDIA_TYPE", "video/mp4")

    # Request size limit for uploads (in bytes).
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(500 * 1024 * 1024)))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS configuration: comma-separated origins. Default is "*" which is
    # acceptable for local development but should be tightened in production.
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")


settings = Settings()
