"""FastAPI dependencies shared across routes."""

from __future__ import annotations

from fastapi import Request

from privlearn.services.catalog import ModuleCatalog
from privlearn.services.ledger import ProgressLedger


def get_ledger(request: Request) -> ProgressLedger:
    return request.app.state.ledger


def get_catalog(request: Request) -> ModuleCatalog:
    return request.app.state.catalog
