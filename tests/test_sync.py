# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from nutriflow.chat.storage import list_chats, mark_read, reconcile, resolve_chat, send_message
from nutriflow.docstore import DocumentStore
from nutriflow.errors import DocumentNotFoundError, ValidationFailedError, WriteFailedError
from nutriflow.query import DocumentRef
from nutriflow.repository import ScopedRepository
from nutriflow.session import Session, SessionContext
from nutriflow.sync import (
    DetailWrite,
    add_food_item,
    commit_with_summary_update,
    meal_calories,
    project_last_message,
    remove_food_item,
    strip_identity,
)


def _repo(uid: str) -> ScopedRepository:
    return ScopedRepository(SessionContext(Session(id=uid)))


class TestChatSync(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutriflow-sync-"))
        self.store = DocumentStore(self._tmp / "store.db")
        self.pro = _repo("pro")

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_resolve_chat_creates_once_then_reuses(self) -> None:
        chat, created = resolve_chat(self.store, list_chats(self.store, self.pro), "pro", "p1")
        self.assertTrue(created)
        self.assertEqual(chat["participants"], ["pro", "p1"])
        self.assertIsNotNone(chat["createdAt"])
        self.assertEqual(chat["createdAt"], chat["updatedAt"])

        again, created_again = resolve_chat(self.store, list_chats(self.store, self.pro), "pro", "p1")
        self.assertFalse(created_again)
        self.assertEqual(again["id"], chat["id"])
        self.assertEqual(len(list_chats(self.store, self.pro)), 1)

    def test_resolve_chat_with_a_new_counterpart_creates_a_second_chat(self) -> None:
        first, _ = resolve_chat(self.store, [], "pro", "p1")
        before = self.store.get_document(f"chats/{first['id']}").data

        second, created = resolve_chat(self.store, list_chats(self.store, self.pro), "pro", "p2")
        self.assertTrue(created)
        self.assertNotEqual(second["id"], first["id"])
        self.assertEqual(second["participants"], ["pro", "p2"])

        self.assertEqual(self.store.get_document(f"chats/{first['id']}").data, before)
        participants = sorted(tuple(c["participants"]) for c in list_chats(self.store, self.pro))
        self.assertEqual(participants, [("pro", "p1"), ("pro", "p2")])

    def test_resolve_chat_only_sees_the_snapshot_it_is_given(self) -> None:
        resolve_chat(self.store, [], "pro", "p1")
        resolve_chat(self.store, [], "pro", "p1")
        self.assertEqual(len(list_chats(self.store, self.pro)), 2)

    def test_send_message_updates_last_message_and_updated_at(self) -> None:
        chat, _ = resolve_chat(self.store, [], "pro", "p1")
        sent = send_message(self.store, self.pro, chat["id"], "  Olá, tudo bem?  ")
        self.assertEqual(sent["text"], "Olá, tudo bem?")
        self.assertFalse(sent["read"])

        saved = self.store.get_document(f"chats/{chat['id']}").data
        self.assertEqual(saved["lastMessage"]["text"], "Olá, tudo bem?")
        self.assertEqual(saved["lastMessage"]["senderId"], "pro")
        self.assertEqual(saved["lastMessage"]["timestamp"], sent["timestamp"])
        self.assertEqual(saved["updatedAt"], sent["timestamp"])

    def test_blank_message_is_rejected_before_any_write(self) -> None:
        chat, _ = resolve_chat(self.store, [], "pro", "p1")
        with self.assertRaises(ValidationFailedError):
            send_message(self.store, self.pro, chat["id"], "   ")
        self.assertEqual(self.store.list_collection(f"chats/{chat['id']}/messages"), [])

    def test_non_participant_cannot_read_or_write(self) -> None:
        chat, _ = resolve_chat(self.store, [], "pro", "p1")
        with self.assertRaises(DocumentNotFoundError):
            send_message(self.store, _repo("intruder"), chat["id"], "hi")

    def test_mark_read_flips_only_received_messages(self) -> None:
        chat, _ = resolve_chat(self.store, [], "pro", "p1")
        send_message(self.store, self.pro, chat["id"], "from pro")
        send_message(self.store, _repo("p1"), chat["id"], "from patient")

        self.assertEqual(mark_read(self.store, self.pro, chat["id"]), 1)
        flags = {d.data["text"]: d.data["read"] for d in self.store.list_collection(f"chats/{chat['id']}/messages")}
        self.assertEqual(flags, {"from pro": False, "from patient": True})
        self.assertEqual(mark_read(self.store, self.pro, chat["id"]), 0)

    def test_summary_failure_keeps_detail_and_raises(self) -> None:
        detail = DetailWrite(path="chats/missing/messages", fields={"text": "hi", "senderId": "pro", "timestamp": 1})
        with self.assertLogs("nutriflow.sync", level="WARNING") as logs:
            with self.assertRaises(WriteFailedError) as ctx:
                commit_with_summary_update(self.store, detail, DocumentRef("chats/missing"), project_last_message)
        self.assertEqual(ctx.exception.operation, "update")
        self.assertIn("stale", logs.output[0])
        self.assertEqual(len(self.store.list_collection("chats/missing/messages")), 1)

    def test_failed_merge_detail_is_reported_as_update(self) -> None:
        def broken_write(path, fields, mode="create"):
            raise RuntimeError("disk full")

        self.store.write = broken_write
        detail = DetailWrite(path="chats/c1/messages/m1", fields={"read": True}, mode="merge")
        with self.assertLogs("nutriflow.sync", level="ERROR"):
            with self.assertRaises(WriteFailedError) as ctx:
                commit_with_summary_update(self.store, detail, DocumentRef("chats/c1"), project_last_message)
        self.assertEqual(ctx.exception.operation, "update")
        self.assertEqual(DetailWrite(path="chats/c1/messages").operation, "create")

    def test_reconcile_rebuilds_summary_from_messages(self) -> None:
        chat, _ = resolve_chat(self.store, [], "pro", "p1")
        send_message(self.store, self.pro, chat["id"], "first")
        last = send_message(self.store, self.pro, chat["id"], "second")
        self.store.update(f"chats/{chat['id']}", {"lastMessage": {"text": "stale"}})

        summary = reconcile(self.store, self.pro, chat["id"])
        self.assertEqual(summary["lastMessage"]["text"], "second")
        saved = self.store.get_document(f"chats/{chat['id']}").data
        self.assertEqual(saved["lastMessage"]["text"], "second")
        self.assertEqual(saved["updatedAt"], last["timestamp"])


class TestMealSync(unittest.TestCase):
    def test_meal_calories_follow_items(self) -> None:
        meal = {"name": "Café da manhã", "time": "07:00", "calories": 0, "items": []}
        meal = add_food_item(meal, {"food": "Pão integral", "quantity": "2", "calories": 140})
        meal = add_food_item(meal, {"food": "Ovo", "quantity": "1", "calories": 78})
        self.assertEqual(meal["calories"], 218)
        self.assertEqual(meal["calories"], meal_calories(meal["items"]))

        meal = remove_food_item(meal, 0)
        self.assertEqual(meal["calories"], 78)
        self.assertEqual([i["food"] for i in meal["items"]], ["Ovo"])
        with self.assertRaises(IndexError):
            remove_food_item(meal, 5)

    def test_strip_identity_is_a_deep_copy_without_id(self) -> None:
        source = {"id": "abc", "title": "Plano", "meals": [{"name": "Almoço", "items": []}]}
        copied = strip_identity(source)
        self.assertNotIn("id", copied)
        copied["meals"][0]["name"] = "Jantar"
        self.assertEqual(source["meals"][0]["name"], "Almoço")


if __name__ == "__main__":
    unittest.main()
