# -*- coding: utf-8 -*-
"""Process-wide services and the FastAPI dependencies that hand them out."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Depends, Request

from .auth.security import IdentityProvider, get_current_user
from .auth.storage import init_accounts
from .config import Settings
from .docstore import DocumentStore
from .repository import ScopedRepository
from .session import Session, SessionContext
from .subscriptions import SubscriptionManager
from .uploads.storage import ObjectStorage

logger = logging.getLogger(__name__)


class Services:
    """Store, identity provider, live-query manager and object storage for one app instance."""

    def __init__(self, config: Settings) -> None:
        self.settings = config
        self.store = DocumentStore(config.db_path)
        init_accounts(config.db_path)
        self.identity = IdentityProvider(config.jwt_secret, ttl_days=config.token_ttl_days, db_path=config.db_path)
        self.subscriptions = SubscriptionManager(self.store)
        self.object_storage = ObjectStorage(config.upload_root, max_bytes=config.max_upload_bytes)
        logger.info("Services ready (db=%s)", config.db_path)

    def close(self) -> None:
        self.subscriptions.close()
        logger.info("Services closed")


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_store(services: Services = Depends(get_services)) -> DocumentStore:
    return services.store


def get_session_context(user: Dict[str, Any] = Depends(get_current_user)) -> SessionContext:
    return SessionContext(Session.from_user(user))


def get_repository(session: SessionContext = Depends(get_session_context)) -> ScopedRepository:
    return ScopedRepository(session)
