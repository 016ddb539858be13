# -*- coding: utf-8 -*-
"""Scoped repository accessor.

Builds references to the collections of the signed-in professional.
Collections owned by one user live under ``users/{uid}/...``; shared
collections (appointments, chats) are filtered by an owner/participant
field instead. Without a session every accessor returns ``None`` so no
unscoped query can be built.
"""

from __future__ import annotations

from typing import Optional

from .query import CollectionRef, DocumentRef, Filter, Order, Query
from .session import SessionContext

USERS = "users"
PATIENTS = "patients"
DIET_PLANS = "dietPlans"
FINANCIAL = "financial"
APPOINTMENTS = "appointments"
CHATS = "chats"
MESSAGES = "messages"


class ScopedRepository:
    def __init__(self, session: SessionContext) -> None:
        self.session = session

    @property
    def uid(self) -> Optional[str]:
        return self.session.uid

    def user_doc(self) -> Optional[DocumentRef]:
        uid = self.uid
        if not uid:
            return None
        return DocumentRef(f"{USERS}/{uid}")

    def _owned(self, name: str) -> Optional[CollectionRef]:
        uid = self.uid
        if not uid:
            return None
        return CollectionRef(f"{USERS}/{uid}/{name}")

    def patients(self) -> Optional[CollectionRef]:
        return self._owned(PATIENTS)

    def diet_plans(self) -> Optional[CollectionRef]:
        return self._owned(DIET_PLANS)

    def financial(self) -> Optional[CollectionRef]:
        return self._owned(FINANCIAL)

    def appointments(self) -> Optional[CollectionRef]:
        uid = self.uid
        if not uid:
            return None
        return CollectionRef(APPOINTMENTS, base_filters=(Filter("nutritionistId", "==", uid),))

    def chats(self) -> Optional[CollectionRef]:
        uid = self.uid
        if not uid:
            return None
        return CollectionRef(
            CHATS,
            base_filters=(Filter("participants", "array-contains", uid),),
            base_order=Order("updatedAt", descending=True),
        )

    def chat_doc(self, chat_id: str) -> Optional[DocumentRef]:
        if not self.uid:
            return None
        return DocumentRef(f"{CHATS}/{chat_id}")

    def messages(self, chat_id: str) -> Optional[CollectionRef]:
        if not self.uid or not chat_id:
            return None
        return CollectionRef(f"{CHATS}/{chat_id}/{MESSAGES}", base_order=Order("timestamp"))

    def query(self, name: str) -> Optional[Query]:
        """Default live query for a named collection (used by the realtime bridge)."""
        builders = {
            PATIENTS: lambda: self._ordered(self.patients(), "createdAt", "desc"),
            DIET_PLANS: lambda: self._ordered(self.diet_plans(), "createdAt", "desc"),
            FINANCIAL: lambda: self._ordered(self.financial(), "date", "desc"),
            APPOINTMENTS: lambda: self._ordered(self.appointments(), None, None),
            CHATS: lambda: self._ordered(self.chats(), None, None),
        }
        builder = builders.get(name)
        return builder() if builder else None

    @staticmethod
    def _ordered(ref: Optional[CollectionRef], field: Optional[str], direction: Optional[str]) -> Optional[Query]:
        if ref is None:
            return None
        query = ref.query()
        if field:
            query = query.order_by(field, direction or "asc")
        return query
