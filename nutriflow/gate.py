# -*- coding: utf-8 -*-
"""Auth gate for protected views."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from .session import Session, SessionContext
from .subscriptions import Subscription

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    checking = "checking"
    authenticated = "authenticated"
    unauthenticated = "unauthenticated"


class AuthGate:
    """checking -> authenticated | unauthenticated, re-evaluated on every session change.

    While unauthenticated the gate calls ``redirect`` with the login entry
    point. ``unmount`` detaches the session listener.
    """

    def __init__(
        self,
        session: SessionContext,
        redirect: Callable[[str], None],
        *,
        login_path: str = "/login",
        on_state: Optional[Callable[[GateState], None]] = None,
    ) -> None:
        self.session = session
        self.redirect = redirect
        self.login_path = login_path
        self.on_state = on_state
        self.state = GateState.checking
        self._listener: Optional[Subscription] = None

    @property
    def mounted(self) -> bool:
        return self._listener is not None and self._listener.active

    def mount(self) -> GateState:
        if self.mounted:
            return self.state
        self._transition(GateState.checking)
        self._listener = self.session.on_change(self._on_session)
        return self.state

    def unmount(self) -> None:
        if self._listener is not None:
            self._listener.cancel()
        self._listener = None

    def _on_session(self, session: Optional[Session]) -> None:
        if session is not None:
            self._transition(GateState.authenticated)
            return
        self._transition(GateState.unauthenticated)
        logger.info("Unauthenticated session, redirecting to %s", self.login_path)
        self.redirect(self.login_path)

    def _transition(self, state: GateState) -> None:
        self.state = state
        if self.on_state is not None:
            self.on_state(state)
