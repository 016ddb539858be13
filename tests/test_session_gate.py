# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from nutriflow.docstore import DocumentStore
from nutriflow.gate import AuthGate, GateState
from nutriflow.patients.storage import create_patient, list_patients
from nutriflow.repository import ScopedRepository
from nutriflow.session import Session, SessionContext


class TestScopedRepository(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutriflow-repo-"))
        self.store = DocumentStore(self._tmp / "store.db")

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_no_session_means_no_references(self) -> None:
        repo = ScopedRepository(SessionContext())
        self.assertIsNone(repo.user_doc())
        self.assertIsNone(repo.patients())
        self.assertIsNone(repo.diet_plans())
        self.assertIsNone(repo.financial())
        self.assertIsNone(repo.appointments())
        self.assertIsNone(repo.chats())
        self.assertIsNone(repo.messages("c1"))
        self.assertIsNone(repo.query("patients"))
        self.assertEqual(list_patients(self.store, repo), [])

    def test_references_are_scoped_to_the_session(self) -> None:
        repo = ScopedRepository(SessionContext(Session(id="u1")))
        self.assertEqual(repo.patients().path, "users/u1/patients")
        self.assertEqual(repo.diet_plans().path, "users/u1/dietPlans")
        self.assertEqual(repo.financial().path, "users/u1/financial")
        self.assertEqual(repo.user_doc().path, "users/u1")
        appointments = repo.appointments().query()
        self.assertEqual(appointments.collection, "appointments")
        self.assertEqual(appointments.filters[0].value, "u1")

    def test_two_sessions_never_see_each_others_patients(self) -> None:
        alice = ScopedRepository(SessionContext(Session(id="alice")))
        bob = ScopedRepository(SessionContext(Session(id="bob")))
        create_patient(self.store, alice, {"name": "P1", "email": "p1@x.com", "phone": "1", "birthDate": "1990-01-01"})
        create_patient(self.store, bob, {"name": "P2", "email": "p2@x.com", "phone": "2", "birthDate": "1990-01-01"})

        self.assertEqual([p["name"] for p in list_patients(self.store, alice)], ["P1"])
        self.assertEqual([p["name"] for p in list_patients(self.store, bob)], ["P2"])

    def test_repository_follows_session_changes(self) -> None:
        ctx = SessionContext()
        repo = ScopedRepository(ctx)
        ctx.sign_in(Session(id="u9"))
        self.assertEqual(repo.patients().path, "users/u9/patients")
        ctx.sign_out()
        self.assertIsNone(repo.patients())


class TestAuthGate(unittest.TestCase):
    def test_unauthenticated_redirects_to_login(self) -> None:
        redirects = []
        states = []
        gate = AuthGate(SessionContext(), redirects.append, on_state=states.append)
        self.assertEqual(gate.mount(), GateState.unauthenticated)
        self.assertEqual(states, [GateState.checking, GateState.unauthenticated])
        self.assertEqual(redirects, ["/login"])

    def test_follows_sign_in_and_sign_out(self) -> None:
        redirects = []
        ctx = SessionContext(Session(id="u1", display_name="Ana"))
        gate = AuthGate(ctx, redirects.append)
        self.assertEqual(gate.mount(), GateState.authenticated)
        self.assertEqual(redirects, [])

        ctx.sign_out()
        self.assertEqual(gate.state, GateState.unauthenticated)
        self.assertEqual(redirects, ["/login"])

        ctx.sign_in(Session(id="u1"))
        self.assertEqual(gate.state, GateState.authenticated)

    def test_unmount_detaches_listener(self) -> None:
        redirects = []
        ctx = SessionContext(Session(id="u1"))
        gate = AuthGate(ctx, redirects.append)
        gate.mount()
        self.assertTrue(gate.mounted)
        gate.unmount()
        self.assertFalse(gate.mounted)

        ctx.sign_out()
        self.assertEqual(gate.state, GateState.authenticated)
        self.assertEqual(redirects, [])

    def test_session_listener_gets_current_value_and_profile_edits(self) -> None:
        seen = []
        ctx = SessionContext(Session(id="u1", display_name="Ana", email="ana@x.com"))
        handle = ctx.on_change(seen.append)
        ctx.update_profile(display_name="Ana Souza")
        handle.cancel()
        ctx.sign_out()

        self.assertEqual([s.display_name for s in seen], ["Ana", "Ana Souza"])
        self.assertEqual(seen[-1].to_dict(), {"id": "u1", "displayName": "Ana Souza", "email": "ana@x.com"})


if __name__ == "__main__":
    unittest.main()
