# -*- coding: utf-8 -*-
"""Uploads — serve stored objects."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..services import Services, get_services

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])


@router.get("/files/{object_path:path}", summary="Download a stored object")
def download_object(object_path: str, services: Services = Depends(get_services)):
    found = services.object_storage.resolve(object_path)
    if not found:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(str(found["path"]), media_type=str(found["content_type"]))
