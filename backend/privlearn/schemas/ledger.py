from __future__ import annotations

from pydantic import BaseModel


class CompletionRequest(BaseModel):
    completed: bool = True


class ModuleProgressItem(BaseModel):
    module_id: int
    progress: int
    lessons: list[bool]


class ProgressResponse(BaseModel):
    account: str
    enrolled_day: int
    last_active_day: int
    learning_streak: int
    total_progress: int
    completed_lessons: int
    completed_modules: int
    modules: list[ModuleProgressItem]


class TotalProgressResponse(BaseModel):
    total_progress: int


class ModuleProgressResponse(BaseModel):
    module_id: int
    progress: int


class CompletedLessonsResponse(BaseModel):
    completed_lessons: int


class CompletedModulesResponse(BaseModel):
    completed_modules: int


class StreakResponse(BaseModel):
    learning_streak: int


class LessonStatusResponse(BaseModel):
    module_id: int
    lesson_id: int
    completed: bool


class EnrolledResponse(BaseModel):
    account: str
    enrolled: bool
