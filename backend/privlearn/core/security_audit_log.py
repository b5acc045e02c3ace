from __future__ import annotations

import json

from fastapi import Request
from sqlalchemy.orm import Session

from privlearn.core.request_context import client_ip, request_account, request_id
from privlearn.models.security_audit import SecurityAuditEvent


def _meta_str(meta: dict | str | None) -> str | None:
    if isinstance(meta, dict):
        return json.dumps(meta, ensure_ascii=False, sort_keys=True)
    if isinstance(meta, str):
        return meta
    return None


def audit_log(
    *,
    db: Session,
    request: Request,
    event_type: str,
    meta: dict | str | None = None,
) -> SecurityAuditEvent:
    """Stage an audit row for the calling account and flush it.

    The row is flushed, not committed, so the caller can still roll it back
    together with whatever change it describes.
    """
    event = SecurityAuditEvent(
        actor_account=request_account(request),
        event_type=str(event_type),
        meta=_meta_str(meta),
        request_id=request_id(request),
        ip=client_ip(request),
    )
    db.add(event)
    db.flush()
    return event


def amend_audit_meta(event: SecurityAuditEvent, **extra) -> None:
    base = json.loads(event.meta) if event.meta else {}
    base.update(extra)
    event.meta = _meta_str(base)
