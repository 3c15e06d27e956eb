import tempfile
import unittest
from pathlib import Path

from flask import Flask

from panelboard.api import register_api
from panelboard.db.repository import NoteRepository, PanelRepository
from panelboard.db.schema import init_database
from panelboard.layouts.templates import get_default_panels

LAYOUT = {
    "panels": {
        "left": {
            "title": "My Projects",
            "widgets": [
                {"id": 1, "title": "Current Work", "content": "", "color": "#00d563",
                 "large": False, "small": False, "position": "1 / 1 / 3 / 3"},
                {"id": 2, "title": "Ideas", "content": "x", "color": "#228be6",
                 "large": False, "small": True},
            ],
        },
        "center": {"title": "Today's Focus", "widgets": []},
    }
}


class _ApiTestCase(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.db_path = Path(self._td.name) / "api.db"
        init_database(self.db_path).close()
        self.panel_repo = PanelRepository(self.db_path)

        server = Flask(__name__)
        register_api(server, self.panel_repo, NoteRepository(self.db_path), ["http://localhost:3067"])
        self.client = server.test_client()

    def tearDown(self):
        self._td.cleanup()


class TestPanelsApi(_ApiTestCase):
    def test_get_panels_empty(self):
        resp = self.client.get("/api/panels")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"panels": {}})

    def test_post_then_get(self):
        resp = self.client.post("/api/panels", json=LAYOUT)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"success": True, "message": "Panels saved successfully"})

        body = self.client.get("/api/panels").get_json()
        self.assertEqual(list(body["panels"]), ["center", "left"])
        self.assertEqual(body["panels"]["left"], LAYOUT["panels"]["left"])

    def test_get_single_panel(self):
        self.client.post("/api/panels", json=LAYOUT)
        resp = self.client.get("/api/panels/left")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["title"], "My Projects")
        self.assertEqual([w["id"] for w in resp.get_json()["widgets"]], [1, 2])

    def test_missing_panel_is_404(self):
        resp = self.client.get("/api/panels/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json(), {"error": "Panel not found"})

    def test_invalid_json_is_400(self):
        resp = self.client.post("/api/panels", data="{not json", content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"error": "Invalid JSON"})

    def test_invalid_layout_is_400_and_store_untouched(self):
        self.panel_repo.save_panels(get_default_panels())
        bad = {"panels": {"left": {"title": "Left", "widgets": [{"id": "x", "title": "A"}]}}}
        resp = self.client.post("/api/panels", json=bad)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.get_json())
        self.assertEqual(sorted(self.panel_repo.get_all_panels()), ["center", "left", "right"])

    def test_oversized_widget_id_is_400(self):
        self.panel_repo.save_panels(get_default_panels())
        bad = {"panels": {"left": {"title": "Left", "widgets": [{"id": 2 ** 63, "title": "A"}]}}}
        resp = self.client.post("/api/panels", json=bad)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("out of range", resp.get_json()["error"])
        self.assertEqual(sorted(self.panel_repo.get_all_panels()), ["center", "left", "right"])

    def test_store_failure_is_500(self):
        self.panel_repo.db_path = Path(self._td.name) / "missing" / "dir" / "x.db"
        resp = self.client.post("/api/panels", json=LAYOUT)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"error": "Failed to save panels"})

        resp = self.client.get("/api/panels")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"error": "Failed to fetch panels"})

    def test_delete_panel(self):
        self.client.post("/api/panels", json=LAYOUT)
        self.assertEqual(self.client.delete("/api/panels/left").status_code, 200)
        self.assertEqual(self.client.delete("/api/panels/left").status_code, 404)
        self.assertEqual(list(self.client.get("/api/panels").get_json()["panels"]), ["center"])

    def test_cors_header_for_allowed_origin(self):
        resp = self.client.get("/api/panels", headers={"Origin": "http://localhost:3067"})
        self.assertEqual(resp.headers.get("Access-Control-Allow-Origin"), "http://localhost:3067")


class TestHealthApi(_ApiTestCase):
    def test_info(self):
        body = self.client.get("/api").get_json()
        self.assertEqual(body["message"], "Panelboard API")
        self.assertEqual(body["endpoints"]["panels"], "/api/panels")

    def test_health(self):
        body = self.client.get("/api/health").get_json()
        self.assertEqual(body["status"], "OK")
        self.assertIn("uptime", body)

    def test_detailed_health(self):
        resp = self.client.get("/api/health/detailed")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["database"], "Connected")

        self.panel_repo.db_path = Path(self._td.name) / "missing" / "x.db"
        resp = self.client.get("/api/health/detailed")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()["database"], "Disconnected")

    def test_unknown_route_is_json_404(self):
        for path in ("/api/nothing-here", "/api/panels/left/extra"):
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, 404)
                self.assertTrue(resp.is_json)
                self.assertEqual(resp.get_json()["error"], "Not Found")
                self.assertIn("timestamp", resp.get_json())

    def test_unknown_route_outside_api_is_not_json(self):
        resp = self.client.get("/elsewhere")
        self.assertEqual(resp.status_code, 404)
        self.assertFalse(resp.is_json)


class TestNotesApi(_ApiTestCase):
    def test_note_lifecycle(self):
        resp = self.client.post("/api/notes", json={"note": "hi", "color": "#fff000", "user": "sam"})
        self.assertEqual(resp.status_code, 201)
        note_id = resp.get_json()["id"]

        self.assertEqual(self.client.get(f"/api/notes/{note_id}").get_json()["note"], "hi")
        self.assertEqual(len(self.client.get("/api/notes").get_json()), 1)

        resp = self.client.put(f"/api/notes/{note_id}", json={"note": "bye", "color": "#fff000", "user": "sam"})
        self.assertEqual(resp.get_json(), {"id": note_id, "note": "bye", "color": "#fff000", "user": "sam"})

        resp = self.client.delete(f"/api/notes/{note_id}")
        self.assertEqual(resp.get_json()["message"], "Note deleted successfully")
        self.assertEqual(self.client.get(f"/api/notes/{note_id}").status_code, 404)

    def test_validation(self):
        resp = self.client.post("/api/notes", json={"note": "hi"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"error": "Missing required fields: note, color, user"})
        self.assertEqual(self.client.get("/api/notes/abc").status_code, 400)
        self.assertEqual(self.client.get("/api/notes/0").status_code, 400)


class TestDashServer(unittest.TestCase):
    def test_create_app_mounts_api_and_falls_back_to_defaults(self):
        from panelboard.app import create_app, load_engine_from_db
        from panelboard.config import Config

        with tempfile.TemporaryDirectory() as td:
            config = Config(db_path=Path(td) / "app.db")
            app = create_app(config)
            client = app.server.test_client()

            self.assertEqual(client.get("/api/panels").get_json(), {"panels": {}})
            self.assertEqual(client.get("/api/health").status_code, 200)
            # Dash serves its page for any path; /api paths still get JSON errors
            resp = client.get("/api/nothing-here")
            self.assertEqual(resp.status_code, 404)
            self.assertEqual(resp.get_json()["error"], "Not Found")

            engine = load_engine_from_db(config, app.server.config["panel_repo"])
            self.assertEqual(list(engine.panels), ["left", "center", "right"])
            self.assertEqual(str(engine.get_widget(1).position), "1 / 1 / 3 / 3")


if __name__ == "__main__":
    unittest.main(verbosity=2)
