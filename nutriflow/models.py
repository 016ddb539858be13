# -*- coding: utf-8 -*-
"""Shared Pydantic bases.

Documents are stored with camelCase field names; Python code uses
snake_case attributes with camelCase aliases.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_fields(self, *, exclude_unset: bool = False) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, exclude_unset=exclude_unset)


class Notification(BaseModel):
    level: str = "success"
    message: str


class StatusResponse(BaseModel):
    status: str = "ok"
    id: Optional[str] = None
    notification: Optional[Notification] = None
