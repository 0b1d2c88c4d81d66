from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("audit")


@dataclass
class AuditEvent:
    """Structured representation of a job lifecycle event.

    Payloads carry identifiers and status values only, never media bytes,
    transcript text or credentials.
    """

    timestamp: str
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class AuditService:
    def log_event(
        self,
        *,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a structured lifecycle event.

        - `action`: high-level verb, e.g. "submit_job", "status_change",
          "fetch_failed".
        - `resource_type`: coarse type, e.g. "processing_job", "transcript".
        - `resource_id`: remote identifier when available.
        - `extra`: optional small dict of metadata (status, failure kind).
        """

        event = AuditEvent(
            timestamp=datetime.now(timezone.utc).isoformat(),
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            extra=extra,
        )

        try:
            logger.info(json.dumps(asdict(event)))
        except TypeError:
            # Something in extra is not JSON serializable; drop it.
            safe_event = asdict(event)
            safe_event["extra"] = None
            logger.info(json.dumps(safe_event))


audit_service = AuditService()
