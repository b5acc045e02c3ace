from __future__ import annotations

from fastapi import APIRouter, Depends

from privlearn.core.config import settings
from privlearn.core.rate_limit import account_rate_limit, rate_limit
from privlearn.core.security import get_current_account
from privlearn.routers.deps import get_ledger
from privlearn.schemas.ledger import (
    CompletedLessonsResponse,
    CompletedModulesResponse,
    CompletionRequest,
    EnrolledResponse,
    LessonStatusResponse,
    ModuleProgressResponse,
    ProgressResponse,
    StreakResponse,
    TotalProgressResponse,
)
from privlearn.services.ledger import ProgressLedger, ProgressSnapshot

router = APIRouter(prefix="/ledger", tags=["ledger"])


def _progress_payload(snap: ProgressSnapshot) -> dict:
    return {
        "account": snap.account,
        "enrolled_day": snap.enrolled_day,
        "last_active_day": snap.last_active_day,
        "learning_streak": snap.learning_streak,
        "total_progress": snap.total_progress,
        "completed_lessons": snap.completed_lessons,
        "completed_modules": snap.completed_modules,
        "modules": [
            {"module_id": m.module_id, "progress": m.progress, "lessons": list(m.lessons)}
            for m in snap.modules
        ],
    }


@router.post("/enroll", response_model=ProgressResponse)
def enroll(
    account: str = Depends(get_current_account),
    ledger: ProgressLedger = Depends(get_ledger),
    _: object = account_rate_limit(action="ledger_enroll", limit=settings.rate_limit_writes_per_minute),
):
    return _progress_payload(ledger.enroll(account))


@router.put("/lessons/{module_id}/{lesson_id}", response_model=ProgressResponse)
def record_completion(
    module_id: int,
    lesson_id: int,
    body: CompletionRequest,
    account: str = Depends(get_current_account),
    ledger: ProgressLedger = Depends(get_ledger),
    _: object = account_rate_limit(action="ledger_lesson", limit=settings.rate_limit_writes_per_minute),
):
    snap = ledger.record_completion(account, module_id, lesson_id, body.completed)
    return _progress_payload(snap)


@router.get("/me", response_model=ProgressResponse)
def my_progress(account: str = Depends(get_current_account), ledger: ProgressLedger = Depends(get_ledger)):
    return _progress_payload(ledger.snapshot(account))


@router.get("/me/total-progress", response_model=TotalProgressResponse)
def my_total_progress(account: str = Depends(get_current_account), ledger: ProgressLedger = Depends(get_ledger)):
    return {"total_progress": ledger.total_progress(account)}


@router.get("/me/modules/{module_id}/progress", response_model=ModuleProgressResponse)
def my_module_progress(
    module_id: int,
    account: str = Depends(get_current_account),
    ledger: ProgressLedger = Depends(get_ledger),
):
    return {"module_id": module_id, "progress": ledger.module_progress(account, module_id)}


@router.get("/me/completed-lessons", response_model=CompletedLessonsResponse)
def my_completed_lessons(account: str = Depends(get_current_account), ledger: ProgressLedger = Depends(get_ledger)):
    return {"completed_lessons": ledger.completed_lessons(account)}


@router.get("/me/completed-modules", response_model=CompletedModulesResponse)
def my_completed_modules(account: str = Depends(get_current_account), ledger: ProgressLedger = Depends(get_ledger)):
    return {"completed_modules": ledger.completed_modules(account)}


@router.get("/me/streak", response_model=StreakResponse)
def my_streak(account: str = Depends(get_current_account), ledger: ProgressLedger = Depends(get_ledger)):
    return {"learning_streak": ledger.learning_streak(account)}


@router.get("/me/lessons/{module_id}/{lesson_id}", response_model=LessonStatusResponse)
def my_lesson_status(
    module_id: int,
    lesson_id: int,
    account: str = Depends(get_current_account),
    ledger: ProgressLedger = Depends(get_ledger),
):
    return {
        "module_id": module_id,
        "lesson_id": lesson_id,
        "completed": ledger.is_lesson_completed(account, module_id, lesson_id),
    }


@router.get("/enrolled/{account}", response_model=EnrolledResponse)
def enrolled(
    account: str,
    ledger: ProgressLedger = Depends(get_ledger),
    _: object = rate_limit(action="ledger_lookup", limit=settings.rate_limit_lookups_per_minute),
):
    return {"account": account, "enrolled": ledger.is_enrolled(account)}
