from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from privlearn.core.security import get_current_account
from privlearn.db.session import get_db
from privlearn.models.audit import LearningEvent
from privlearn.schemas.events import EventsResponse

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/me", response_model=EventsResponse)
def my_events(
    db: Session = Depends(get_db),
    account: str = Depends(get_current_account),
    limit: int = Query(default=50),
):
    take = max(1, min(int(limit or 50), 200))
    rows = db.scalars(
        select(LearningEvent)
        .where(LearningEvent.account == account)
        .order_by(LearningEvent.id.desc())
        .limit(take)
    ).all()
    return {
        "items": [
            {
                "type": e.type.value,
                "module_id": e.module_id,
                "lesson_id": e.lesson_id,
                "completed": e.completed,
                "day": e.day,
                "created_at": e.created_at.isoformat(),
            }
            for e in rows
        ]
    }
