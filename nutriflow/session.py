# -*- coding: utf-8 -*-
"""Session context — the identity every scoped operation is keyed by."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .subscriptions import Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    id: str
    display_name: str = ""
    email: str = ""

    @classmethod
    def from_user(cls, user: Dict[str, Any]) -> "Session":
        return cls(
            id=str(user["id"]),
            display_name=str(user.get("name") or user.get("display_name") or ""),
            email=str(user.get("email") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "displayName": self.display_name, "email": self.email}


SessionListener = Callable[[Optional[Session]], None]


class SessionContext:
    """Holds the current session and notifies listeners when it changes.

    Constructed explicitly and passed to whatever needs identity. There is
    no module-level instance.
    """

    def __init__(self, session: Optional[Session] = None) -> None:
        self._session = session
        self._listeners: List[SessionListener] = []
        self._lock = threading.Lock()

    def current_session(self) -> Optional[Session]:
        return self._session

    @property
    def uid(self) -> Optional[str]:
        return self._session.id if self._session else None

    def sign_in(self, session: Session) -> None:
        self._set(session)

    def sign_out(self) -> None:
        self._set(None)

    def update_profile(self, *, display_name: Optional[str] = None) -> None:
        """Push profile edits (display name) back into the live session."""
        if self._session is None or display_name is None:
            return
        self._set(Session(id=self._session.id, display_name=display_name, email=self._session.email))

    def on_change(self, listener: SessionListener) -> Subscription:
        """Register ``listener`` and call it once with the current session."""
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        handle = Subscription(on_cancel=remove)
        listener(self._session)
        return handle

    def _set(self, session: Optional[Session]) -> None:
        self._session = session
        with self._lock:
            listeners = list(self._listeners)
        logger.debug("Session changed: %s", session.id if session else None)
        for listener in listeners:
            listener(session)
