from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text

from privlearn.core.redis_client import get_redis
from privlearn.db import session as session_module
from privlearn.routers.deps import get_catalog, get_ledger
from privlearn.services.catalog import ModuleCatalog
from privlearn.services.ledger import ProgressLedger

router = APIRouter(tags=["health"])


@router.get("/health")
def health(
    catalog: ModuleCatalog = Depends(get_catalog),
    ledger: ProgressLedger = Depends(get_ledger),
):
    return {"status": "ok", "total_modules": catalog.module_count, "enrolled_accounts": len(ledger)}


@router.get("/health/live")
def live():
    return {"status": "live"}


@router.get("/health/ready")
def ready():
    try:
        with session_module.SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(status_code=503, detail={"error_code": "db_not_ready", "error_message": "db not ready"}) from e

    try:
        get_redis().ping()
    except Exception as e:
        raise HTTPException(
            status_code=503, detail={"error_code": "redis_not_ready", "error_message": "redis not ready"}
        ) from e

    return {"status": "ready"}
