# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from nutriflow.docstore import DocumentStore
from nutriflow.query import Query
from nutriflow.subscriptions import ScopedSubscription, SubscriptionManager


class TestSubscriptionManager(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutriflow-subs-"))
        self.store = DocumentStore(self._tmp / "store.db")
        self.manager = SubscriptionManager(self.store)
        self.snapshots = []

    def tearDown(self) -> None:
        self.manager.close()
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_initial_snapshot_then_push_on_change(self) -> None:
        self.store.add("users/u1/patients", {"name": "Ana", "createdAt": 1})
        query = Query("users/u1/patients").order_by("createdAt", "desc")
        self.manager.subscribe(query, self.snapshots.append)
        self.assertEqual(len(self.snapshots), 1)
        self.assertEqual([d.data["name"] for d in self.snapshots[0]], ["Ana"])

        self.store.add("users/u1/patients", {"name": "Bia", "createdAt": 2})
        self.assertEqual(len(self.snapshots), 2)
        self.assertEqual([d.data["name"] for d in self.snapshots[-1]], ["Bia", "Ana"])
        self.assertEqual([s.version for s in self.snapshots], [1, 2])

    def test_writes_elsewhere_or_outside_the_result_are_not_delivered(self) -> None:
        query = Query("users/u1/financial").where("type", "==", "income")
        self.manager.subscribe(query, self.snapshots.append)
        self.store.add("users/u2/financial", {"type": "income"})
        self.store.add("users/u1/financial", {"type": "expense"})
        self.assertEqual(len(self.snapshots), 1)

        self.store.add("users/u1/financial", {"type": "income"})
        self.assertEqual(len(self.snapshots), 2)
        self.assertEqual(len(self.snapshots[-1]), 1)

    def test_cancel_is_idempotent_and_stops_callbacks(self) -> None:
        sub = self.manager.subscribe(Query("chats"), self.snapshots.append)
        self.assertTrue(sub.active)
        sub.cancel()
        sub.cancel()
        self.assertFalse(sub.active)
        self.assertEqual(self.manager.active_count, 0)

        self.store.add("chats", {"participants": ["a", "b"]})
        self.assertEqual(len(self.snapshots), 1)

    def test_errors_are_reported_once_without_retry(self) -> None:
        errors = []
        broken = {"fail": False}
        original = self.store.run_query

        def run_query(query):
            if broken["fail"]:
                raise RuntimeError("backend unavailable")
            return original(query)

        self.store.run_query = run_query
        self.manager.subscribe(Query("chats"), self.snapshots.append, errors.append)
        broken["fail"] = True
        self.store.add("chats", {"participants": ["a"]})
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], RuntimeError)
        self.assertEqual(len(self.snapshots), 1)

    def test_failing_listener_does_not_starve_other_subscriptions(self) -> None:
        errors = []
        seen = []

        def closed_client(snapshot):
            if snapshot.version > 1:
                raise RuntimeError("event loop is closed")

        query = Query("users/u/patients")
        self.manager.subscribe(query, closed_client, errors.append)
        self.manager.subscribe(query, lambda s: seen.append(len(s)))

        with self.assertLogs("nutriflow.subscriptions", level="ERROR"):
            self.store.add("users/u/patients", {"name": "Ana"})
        self.assertEqual(seen, [0, 1])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], RuntimeError)


class TestScopedSubscription(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutriflow-scope-"))
        self.store = DocumentStore(self._tmp / "store.db")
        self.manager = SubscriptionManager(self.store)

    def tearDown(self) -> None:
        self.manager.close()
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_rescope_cancels_previous_before_opening_next(self) -> None:
        seen = []
        scoped = ScopedSubscription(self.manager)
        first = scoped.rescope("chat-a", Query("chats/a/messages"), lambda s: seen.append(("a", len(s))))
        second = scoped.rescope("chat-b", Query("chats/b/messages"), lambda s: seen.append(("b", len(s))))
        self.assertFalse(first.active)
        self.assertTrue(second.active)
        self.assertEqual(self.manager.active_count, 1)

        self.store.add("chats/a/messages", {"text": "old chat"})
        self.store.add("chats/b/messages", {"text": "new chat"})
        self.assertEqual(seen, [("a", 0), ("b", 0), ("b", 1)])

    def test_same_scope_is_a_no_op_and_none_query_tears_down(self) -> None:
        scoped = ScopedSubscription(self.manager)
        first = scoped.rescope("patients", Query("users/u1/patients"), lambda s: None)
        again = scoped.rescope("patients", Query("users/u1/patients"), lambda s: None)
        self.assertIs(first, again)

        self.assertIsNone(scoped.rescope("patients", None, lambda s: None))
        self.assertFalse(first.active)
        self.assertFalse(scoped.active)
        self.assertEqual(self.manager.active_count, 0)


if __name__ == "__main__":
    unittest.main()
