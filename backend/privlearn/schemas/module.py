from __future__ import annotations

from pydantic import BaseModel, Field


class ModulePublic(BaseModel):
    id: int
    name: str
    lesson_count: int
    active: bool


class ModuleCountResponse(BaseModel):
    total_modules: int


class ModuleCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    lesson_count: int


class ModuleCreateResponse(BaseModel):
    id: int


class ModuleToggleResponse(BaseModel):
    ok: bool = True
    module_id: int
    active: bool
