"""Tests for the FastAPI host: command dispatch and error mapping."""

from __future__ import annotations

import unittest

from fastapi.testclient import TestClient

from server.app import create_app
from tin.config import Settings


def _settings(**overrides) -> Settings:
    values = {"TIN_DB_PATH": ":memory:", "TIN_ARCHIVER_ENABLED": False}
    values.update(overrides)
    return Settings(**values)


class TestInvokeRoutes(unittest.TestCase):
    def setUp(self):
        self._client_cm = TestClient(create_app(_settings()))
        self.client = self._client_cm.__enter__()

    def tearDown(self):
        self._client_cm.__exit__(None, None, None)

    def _invoke(self, command, **body):
        return self.client.post(f"/api/invoke/{command}", json=body)

    def test_status(self):
        resp = self.client.get("/api/status")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")
        self.assertFalse(resp.json()["archiver_running"])

    def test_card_and_todo_flow(self):
        card = self._invoke("create_card", title="Groceries", amount="500").json()
        self.assertEqual(card["amount"], "500.000000")

        added = self._invoke("add_todo", card_id=card["id"], title="Milk", amount="12.5").json()
        self.assertEqual(added["updated_card"]["amount"], "487.500000")
        self.assertEqual(added["todo"]["amount"], "12.500000")

        fetched = self._invoke("get_card", card_id=card["id"]).json()
        self.assertEqual(len(fetched["todos"]), 1)

        listed = self._invoke("list_cards").json()
        self.assertEqual([c["id"] for c in listed], [card["id"]])

        changes = self._invoke("recent_changes", limit=2).json()
        self.assertEqual([c["kind"] for c in changes], ["todo_added", "created"])

        hits = self._invoke("search", query="Gro").json()
        self.assertEqual(hits[0]["card_id"], card["id"])

    def test_archive_commands(self):
        card = self._invoke("create_card", amount="1").json()
        self.assertTrue(self._invoke("archive_card", card_id=card["id"]).json()["archived"])
        self.assertEqual(len(self._invoke("list_archived_cards").json()), 1)
        self.assertEqual(self._invoke("archive_old_cards").json(), {"archived_count": 0})
        self.assertEqual(self._invoke("delete_card", card_id=card["id"]).json(), {"ok": True})

    def test_not_found_maps_to_404(self):
        resp = self._invoke("get_card", card_id="nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Card not found: nope"})

        resp = self._invoke("delete_todo", todo_id="nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Todo not found: nope"})

    def test_invalid_amount_maps_to_422(self):
        resp = self._invoke("create_card", amount="lots")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json(), {"error": "Invalid amount: lots"})

    def test_bad_arguments(self):
        resp = self._invoke("add_todo", card_id="c1", title="")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["error"], "Invalid arguments")

    def test_unknown_command(self):
        resp = self._invoke("drop_tables")
        self.assertEqual(resp.status_code, 404)


class TestLifespan(unittest.TestCase):
    def test_scheduler_runs_when_enabled(self):
        app = create_app(_settings(TIN_ARCHIVER_ENABLED=True))
        with TestClient(app) as client:
            self.assertTrue(client.get("/api/status").json()["archiver_running"])
        self.assertFalse(app.state.scheduler.running)


if __name__ == "__main__":
    unittest.main()
