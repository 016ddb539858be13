# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from fastapi.testclient import TestClient

from support import cleanup, fresh_app, new_patient, register


class TestLiveWebSocket(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp, cls.app = fresh_app("nutriflow-live-")
        cls.client, account = register(cls.app, "live@example.com", name="Dra. Live")
        cls.token = account["token"]

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        cleanup(cls._tmp)

    def _connect(self):
        return self.client.websocket_connect(f"/api/ws/live?token={self.token}")

    def test_unauthenticated_client_is_redirected(self) -> None:
        anonymous = TestClient(self.app)
        with anonymous.websocket_connect("/api/ws/live") as ws:
            self.assertEqual(ws.receive_json(), {"type": "redirect", "location": "/login"})
        anonymous.close()

    def test_snapshots_follow_writes(self) -> None:
        with self._connect() as ws:
            hello = ws.receive_json()
            self.assertEqual(hello["type"], "connected")
            self.assertEqual(hello["session"]["displayName"], "Dra. Live")

            ws.send_json({"type": "subscribe", "scope": "list", "collection": "patients"})
            first = ws.receive_json()
            self.assertEqual(first["type"], "snapshot")
            self.assertEqual(first["scope"], "list")
            initial = len(first["docs"])

            patient = new_patient(self.client, "Lia Campos")
            update = ws.receive_json()
            self.assertEqual(update["scope"], "list")
            self.assertEqual(len(update["docs"]), initial + 1)
            self.assertEqual(update["docs"][0]["id"], patient["id"])
            self.assertGreater(update["version"], first["version"])

            ws.send_json({"type": "ping"})
            self.assertEqual(ws.receive_json(), {"type": "pong"})

    def test_rescoping_a_thread_drops_the_previous_chat(self) -> None:
        a = self.client.post("/api/chats", json={"patientId": new_patient(self.client, "Mara Lopes")["id"]}).json()["chat"]
        b = self.client.post("/api/chats", json={"patientId": new_patient(self.client, "Nina Alves")["id"]}).json()["chat"]

        with self._connect() as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "scope": "thread", "collection": "messages", "chatId": a["id"]})
            self.assertEqual(ws.receive_json()["docs"], [])
            ws.send_json({"type": "subscribe", "scope": "thread", "collection": "messages", "chatId": b["id"]})
            self.assertEqual(ws.receive_json()["docs"], [])

            self.client.post(f"/api/chats/{a['id']}/messages", json={"text": "para A"})
            self.client.post(f"/api/chats/{b['id']}/messages", json={"text": "para B"})
            update = ws.receive_json()
            self.assertEqual(update["scope"], "thread")
            self.assertEqual([d["text"] for d in update["docs"]], ["para B"])

    def test_unknown_chat_reports_an_error(self) -> None:
        with self._connect() as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "scope": "thread", "collection": "messages", "chatId": "nope"})
            error = ws.receive_json()
            self.assertEqual(error["type"], "error")
            self.assertEqual(error["message"], "Registro não encontrado")

    def test_logout_redirects(self) -> None:
        with self._connect() as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "scope": "list", "collection": "patients"})
            ws.receive_json()
            ws.send_json({"type": "logout"})
            self.assertEqual(ws.receive_json(), {"type": "redirect", "location": "/login"})


if __name__ == "__main__":
    unittest.main()
