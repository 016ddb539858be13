# -*- coding: utf-8 -*-
"""Dashboard — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..docstore import DocumentStore
from ..repository import ScopedRepository
from ..services import get_repository, get_store
from .models import DashboardResponse
from .storage import build_dashboard

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse, summary="Overview of my practice")
def get_dashboard(
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    return DashboardResponse.model_validate(build_dashboard(store, repo))
