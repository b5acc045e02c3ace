import json
import logging
import time
import uuid
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from privlearn.core.clock import DayClock, utc_day_clock
from privlearn.core.config import settings
from privlearn.core.request_context import request_account, request_id
from privlearn.core.security import is_administrator
from privlearn.db import session as session_module
from privlearn.db.base import Base
from privlearn.models import LearningEvent, SecurityAuditEvent  # noqa: F401
from privlearn.routers import admin, events, health, ledger, modules
from privlearn.services.catalog import ModuleCatalog
from privlearn.services.errors import LedgerError
from privlearn.services.events import EventSink, FanoutSink, JournalSink, LoggingSink
from privlearn.services.ledger import ProgressLedger


def _default_sink() -> EventSink:
    if bool(settings.ledger_journal_enabled):
        return FanoutSink(LoggingSink(level=logging.DEBUG), JournalSink())
    return LoggingSink(level=logging.DEBUG)


def create_app(
    *,
    clock: DayClock | None = None,
    sink: EventSink | None = None,
    catalog: ModuleCatalog | None = None,
) -> FastAPI:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    app = FastAPI(title="privlearn API", version="1.0.0")

    logger = logging.getLogger("privlearn")

    if catalog is None:
        catalog = ModuleCatalog(is_administrator=is_administrator, max_modules=settings.ledger_max_modules)
    app.state.catalog = catalog
    app.state.ledger = ProgressLedger(
        catalog=catalog,
        clock=clock or utc_day_clock(),
        sink=sink if sink is not None else _default_sink(),
    )

    allow_origins = [o.strip() for o in str(settings.cors_allow_origins or "").split(",") if o.strip()]
    if "*" in allow_origins:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not include '*' when allow_credentials=true")

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = rid
        status_code: int | None = None
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 0) or 0)
        except Exception:
            status_code = 500
            raise
        finally:
            path = getattr(getattr(request, "url", None), "path", "")
            if not path.startswith("/health"):
                dur_ms = int((time.perf_counter() - t0) * 1000)
                logger.info(
                    json.dumps(
                        {
                            "ts": datetime.utcnow().isoformat(),
                            "rid": rid,
                            "account": request_account(request),
                            "method": request.method,
                            "path": path,
                            "status": status_code,
                            "duration_ms": dur_ms,
                        },
                        ensure_ascii=False,
                    )
                )
        response.headers["X-Request-ID"] = rid
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        logger.info("ledger rejected request code=%s context=%s", exc.error_code, exc.context)
        return JSONResponse(
            status_code=int(exc.status_code),
            content={
                "ok": False,
                "error_code": exc.error_code,
                "error_message": exc.error_message,
                "request_id": request_id(request),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        rid = request_id(request)
        detail = exc.detail
        if isinstance(detail, dict):
            error_code = str(detail.get("error_code") or "http_error")
            error_message = str(detail.get("error_message") or detail.get("detail") or "request failed")
        else:
            error_code = "forbidden" if int(exc.status_code) == 403 else "unauthorized" if int(exc.status_code) == 401 else "http_error"
            error_message = str(detail or "request failed")

        payload = {
            "ok": False,
            "error_code": error_code,
            "error_message": error_message,
            "request_id": rid,
        }
        return JSONResponse(status_code=int(exc.status_code), content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        rid = request_id(request)
        logger.exception("unhandled exception", extra={"rid": rid})
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "error_code": "internal_error",
                "error_message": "internal server error",
                "request_id": rid,
            },
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["authorization", "content-type", "x-request-id"],
    )

    app.include_router(health.router)
    app.include_router(modules.router)
    app.include_router(ledger.router)
    app.include_router(admin.router)
    app.include_router(events.router)

    @app.on_event("startup")
    async def _create_tables() -> None:
        Base.metadata.create_all(bind=session_module.engine)

    return app


app = create_app()
