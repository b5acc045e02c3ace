import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from privlearn.db.base import Base


class LearningEventType(str, enum.Enum):
    enrolled = "enrolled"
    lesson_completed = "lesson_completed"
    module_completed = "module_completed"
    progress_updated = "progress_updated"


class LearningEvent(Base):
    __tablename__ = "learning_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account: Mapped[str] = mapped_column(String(200), index=True)

    type: Mapped[LearningEventType] = mapped_column(Enum(LearningEventType), index=True)
    module_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    lesson_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    day: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
