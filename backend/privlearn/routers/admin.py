from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from privlearn.core.config import settings
from privlearn.core.rate_limit import account_rate_limit
from privlearn.core.security import get_current_account
from privlearn.core.security_audit_log import amend_audit_meta, audit_log
from privlearn.db.session import get_db
from privlearn.routers.deps import get_catalog
from privlearn.schemas.module import ModuleCreateRequest, ModuleCreateResponse, ModuleToggleResponse
from privlearn.services.catalog import ModuleCatalog

router = APIRouter(prefix="/admin", tags=["admin"])

logger = logging.getLogger("privlearn.admin")


# Catalog edits and their audit rows land together: the row is flushed before
# the catalog changes, and the change is undone if the commit fails.


@router.post("/modules", response_model=ModuleCreateResponse)
def create_module(
    request: Request,
    body: ModuleCreateRequest,
    db: Session = Depends(get_db),
    current: str = Depends(get_current_account),
    catalog: ModuleCatalog = Depends(get_catalog),
    _: object = account_rate_limit(action="admin_create_module", limit=settings.rate_limit_admin_per_minute),
):
    event = audit_log(
        db=db,
        request=request,
        event_type="admin_create_module",
        meta={"name": body.name, "lesson_count": body.lesson_count},
    )
    try:
        module_id = catalog.add_module(current, body.name, body.lesson_count)
    except Exception:
        db.rollback()
        raise

    try:
        amend_audit_meta(event, module_id=module_id)
        db.commit()
    except Exception:
        db.rollback()
        catalog.discard_module(module_id)
        logger.exception("audit commit failed, module add undone module_id=%s", module_id)
        raise
    return {"id": module_id}


@router.post("/modules/{module_id}/toggle", response_model=ModuleToggleResponse)
def toggle_module(
    request: Request,
    module_id: int,
    db: Session = Depends(get_db),
    current: str = Depends(get_current_account),
    catalog: ModuleCatalog = Depends(get_catalog),
    _: object = account_rate_limit(action="admin_toggle_module", limit=settings.rate_limit_admin_per_minute),
):
    event = audit_log(db=db, request=request, event_type="admin_toggle_module", meta={"module_id": module_id})
    try:
        active = catalog.toggle_module(current, module_id)
    except Exception:
        db.rollback()
        raise

    try:
        amend_audit_meta(event, active=active)
        db.commit()
    except Exception:
        db.rollback()
        catalog.set_module_active(current, module_id, not active)
        logger.exception("audit commit failed, module toggle undone module_id=%s", module_id)
        raise
    return {"ok": True, "module_id": module_id, "active": active}
