"""Append-only audit trail of workflow and security actions."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from officehub.models.audit import ActivityLog

logger = logging.getLogger("officehub.activity")


def log_activity(
    db: Session,
    *,
    actor_user_id: Optional[int],
    activity_type: str,
    message: Optional[str] = None,
    payload: Optional[Mapping[str, Any]] = None,
) -> ActivityLog:
    entry = ActivityLog(
        actor_user_id=actor_user_id,
        type=activity_type.upper(),
        message=message,
        payload_json=dict(payload) if payload else None,
    )
    db.add(entry)
    db.flush()
    logger.info(message or entry.type, extra={"user_id": actor_user_id, "event": entry.type})
    return entry
