# -*- coding: utf-8 -*-
"""Error taxonomy shared by the storage layer and the API."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class NutriFlowError(Exception):
    """Base class for errors that carry a user-facing notification."""

    status_code = 500
    message_key = "generic_error"

    def __init__(self, detail: str, *, message_key: Optional[str] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if message_key:
            self.message_key = message_key


class NoSessionError(NutriFlowError):
    """A scoped operation was attempted without an active session."""

    status_code = 401
    message_key = "not_authenticated"


class DocumentNotFoundError(NutriFlowError):
    status_code = 404
    message_key = "not_found"

    def __init__(self, path: str, *, message_key: Optional[str] = None) -> None:
        super().__init__(f"Document not found: {path}", message_key=message_key)
        self.path = path


class ValidationFailedError(NutriFlowError):
    """Required form fields are missing or malformed."""

    status_code = 400
    message_key = "required_fields"


class WriteFailedError(NutriFlowError):
    """A create/update/delete against the store did not complete."""

    status_code = 502
    message_key = "write_failed"

    def __init__(self, operation: str, path: str, *, message_key: Optional[str] = None) -> None:
        super().__init__(f"{operation} failed for {path}", message_key=message_key)
        self.operation = operation
        self.path = path


class UploadTooLargeError(NutriFlowError):
    status_code = 413
    message_key = "image_too_large"

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Upload too large: {size} bytes > {limit}")
        self.size = size
        self.limit = limit


@contextmanager
def reported_write(operation: str, path: str, message_key: str) -> Iterator[None]:
    """Turn store failures into ``WriteFailedError`` with a user-facing message."""
    try:
        yield
    except NutriFlowError:
        raise
    except Exception as exc:
        logger.error("%s of %s failed: %s", operation, path, exc)
        raise WriteFailedError(operation, path, message_key=message_key) from exc
