# -*- coding: utf-8 -*-
"""Uploads — object storage for avatar and logo images on local disk."""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import Dict, Optional

from ..errors import UploadTooLargeError

logger = logging.getLogger(__name__)

URL_PREFIX = "/api/uploads/files"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9._-]+$")

def _safe_object_path(path: str) -> str:
    segments = [s for s in (path or "").strip("/").split("/") if s]
    if not segments:
        raise ValueError("empty object path")
    for segment in segments:
        if segment in {".", ".."} or not _SEGMENT_RE.fullmatch(segment):
            raise ValueError(f"invalid object path segment: {segment!r}")
    return "/".join(segments)

class ObjectStorage:
    """``upload(path, blob) -> url`` over a directory tree."""

    def __init__(self, root: Path, *, max_bytes: int) -> None:
        self.root = root
        self.max_bytes = int(max_bytes)

    def check_size(self, size: int) -> None:
        if size > self.max_bytes:
            raise UploadTooLargeError(size, self.max_bytes)

    def upload(self, path: str, blob: bytes, *, content_type: Optional[str] = None) -> str:
        # Oversized payloads never reach the disk.
        self.check_size(len(blob))
        rel = _safe_object_path(path)
        target = self.root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(blob)
        if content_type:
            target.with_name(target.name + ".type").write_text(content_type, encoding="utf-8")
        logger.info("Stored %s (%d bytes, sha256=%s)", rel, len(blob), hashlib.sha256(blob).hexdigest()[:12])
        return self.url_for(rel)

    def url_for(self, path: str) -> str:
        return f"{URL_PREFIX}/{_safe_object_path(path)}"

    def resolve(self, path: str) -> Optional[Dict[str, object]]:
        try:
            rel = _safe_object_path(path)
        except ValueError:
            return None
        target = self.root / rel
        if not target.is_file() or target.name.endswith(".type"):
            return None
        type_file = target.with_name(target.name + ".type")
        content_type = type_file.read_text(encoding="utf-8").strip() if type_file.exists() else "application/octet-stream"
        return {"path": target, "content_type": content_type}
