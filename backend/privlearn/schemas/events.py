from __future__ import annotations

from pydantic import BaseModel


class EventItem(BaseModel):
    type: str
    module_id: int | None
    lesson_id: int | None
    completed: bool | None
    day: int
    created_at: str


class EventsResponse(BaseModel):
    items: list[EventItem]
