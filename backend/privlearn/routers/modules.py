from __future__ import annotations

from fastapi import APIRouter, Depends

from privlearn.routers.deps import get_catalog
from privlearn.schemas.module import ModuleCountResponse, ModulePublic
from privlearn.services.catalog import ModuleCatalog

router = APIRouter(prefix="/modules", tags=["modules"])


@router.get("", response_model=list[ModulePublic])
def list_modules(catalog: ModuleCatalog = Depends(get_catalog)):
    return [m.to_dict(module_id) for module_id, m in enumerate(catalog.list())]


@router.get("/count", response_model=ModuleCountResponse)
def module_count(catalog: ModuleCatalog = Depends(get_catalog)):
    return {"total_modules": catalog.module_count}


@router.get("/{module_id}", response_model=ModulePublic)
def get_module(module_id: int, catalog: ModuleCatalog = Depends(get_catalog)):
    return catalog.get(module_id).to_dict(module_id)
