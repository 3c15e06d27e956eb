import sqlite3
import tempfile
import unittest
from pathlib import Path

from panelboard.db.repository import NoteRepository, PanelRepository
from panelboard.db.schema import check_connection, get_connection, init_database
from panelboard.exceptions import LayoutStoreError, LayoutValidationError, PanelNotFoundError
from panelboard.layouts.models import GridPosition, PanelData, Widget, WidgetSize
from panelboard.layouts.templates import get_default_panels


class _StoreTestCase(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.db_path = Path(self._td.name) / "panelboard.db"
        init_database(self.db_path).close()
        self.repo = PanelRepository(self.db_path)

    def tearDown(self):
        self._td.cleanup()

    def _count(self, table):
        conn = get_connection(self.db_path)
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()


class TestPanelRepository(_StoreTestCase):
    def test_empty_store(self):
        self.assertEqual(self.repo.get_all_panels(), {})

    def test_save_then_read_back(self):
        snapshot = {
            "left": PanelData("Left", [
                Widget(id=10, title="B", content="body", color="#123456"),
                Widget(id=11, title="A", size=WidgetSize.SMALL, position=GridPosition(1, 1, 2, 3)),
            ]),
            "center": PanelData("Center", [Widget(id=12, title="C", size=WidgetSize.LARGE)]),
        }
        self.repo.save_panels(snapshot)

        stored = self.repo.get_all_panels()
        # Panels come back ordered by key, widgets by their saved order
        self.assertEqual(list(stored), ["center", "left"])
        self.assertEqual([w.id for w in stored["left"].widgets], [10, 11])
        self.assertEqual(stored["left"], snapshot["left"])
        self.assertEqual(stored["center"], snapshot["center"])

    def test_save_replaces_everything(self):
        self.repo.save_panels(get_default_panels())
        self.repo.save_panels({"only": PanelData("Only", [Widget(id=1, title="One")])})

        stored = self.repo.get_all_panels()
        self.assertEqual(list(stored), ["only"])
        self.assertEqual(self._count("widgets"), 1)

    def test_saving_empty_layout_clears_store(self):
        self.repo.save_panels(get_default_panels())
        self.repo.save_panels({})
        self.assertEqual(self.repo.get_all_panels(), {})
        self.assertEqual(self._count("panels"), 0)
        self.assertEqual(self._count("widgets"), 0)

    def test_failed_save_rolls_back(self):
        before = get_default_panels()
        self.repo.save_panels(before)

        broken = {
            "a": PanelData("A", [Widget(id=1, title="ok")]),
            "b": PanelData("B", [Widget(id=2, title=None)]),  # violates NOT NULL
        }
        with self.assertRaises(LayoutStoreError):
            self.repo.save_panels(broken)

        self.assertEqual(self.repo.get_all_panels(), before)

    def test_duplicate_widget_ids_are_rejected_before_writing(self):
        before = get_default_panels()
        self.repo.save_panels(before)

        duplicated = {
            "a": PanelData("A", [Widget(id=5, title="first")]),
            "b": PanelData("B", [Widget(id=5, title="second")]),
        }
        with self.assertRaises(LayoutValidationError):
            self.repo.save_panels(duplicated)

        self.assertEqual(self.repo.get_all_panels(), before)

    def test_out_of_range_id_rolls_back(self):
        before = get_default_panels()
        self.repo.save_panels(before)

        # sqlite3 cannot bind integers wider than 64 bits
        with self.assertRaises(LayoutStoreError):
            self.repo.save_panels({"a": PanelData("A", [Widget(id=2 ** 63, title="huge")])})

        self.assertEqual(self.repo.get_all_panels(), before)

    def test_widget_order_is_list_index(self):
        widgets = [Widget(id=i, title=str(i)) for i in (30, 10, 20)]
        self.repo.save_panels({"p": PanelData("P", widgets)})

        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT widget_id, widget_order FROM widgets ORDER BY widget_order"
            ).fetchall()
        finally:
            conn.close()
        self.assertEqual([tuple(r) for r in rows], [(30, 0), (10, 1), (20, 2)])

    def test_get_panel(self):
        self.repo.save_panels(get_default_panels())
        panel = self.repo.get_panel("center")
        self.assertEqual(panel.title, "Today's Focus")
        self.assertEqual(panel.widgets[0].size, WidgetSize.LARGE)

    def test_get_missing_panel_raises(self):
        with self.assertRaises(PanelNotFoundError) as cm:
            self.repo.get_panel("nope")
        self.assertEqual(cm.exception.panel_key, "nope")

    def test_delete_panel_cascades_to_widgets(self):
        self.repo.save_panels(get_default_panels())
        self.assertTrue(self.repo.delete_panel("left"))
        self.assertFalse(self.repo.delete_panel("left"))
        self.assertNotIn("left", self.repo.get_all_panels())
        self.assertEqual(self._count("widgets"), 8)

    def test_malformed_grid_area_reads_as_unplaced(self):
        self.repo.save_panels({"p": PanelData("P", [Widget(id=1, title="A", position=GridPosition(1, 1, 3, 3))])})
        conn = get_connection(self.db_path)
        try:
            conn.execute("UPDATE widgets SET grid_area = 'garbage'")
        finally:
            conn.close()
        self.assertIsNone(self.repo.get_panel("p").widgets[0].position)

    def test_missing_schema_raises_store_error(self):
        repo = PanelRepository(Path(self._td.name) / "empty.db")
        with self.assertRaises(LayoutStoreError):
            repo.get_all_panels()
        with self.assertRaises(LayoutStoreError):
            repo.save_panels(get_default_panels())


class TestNoteRepository(_StoreTestCase):
    def setUp(self):
        super().setUp()
        self.notes = NoteRepository(self.db_path)

    def test_crud(self):
        note = self.notes.create("buy milk", "#ffee00", "sam")
        self.assertIsNotNone(note.id)
        self.assertEqual(self.notes.get_by_id(note.id).note, "buy milk")

        self.assertTrue(self.notes.update(note.id, "buy bread", "#ffee00", "sam"))
        self.assertEqual(self.notes.get_by_id(note.id).note, "buy bread")

        self.assertTrue(self.notes.delete(note.id))
        self.assertIsNone(self.notes.get_by_id(note.id))
        self.assertFalse(self.notes.delete(note.id))
        self.assertFalse(self.notes.update(note.id, "x", "y", "z"))

    def test_newest_first(self):
        first = self.notes.create("one", "#000000", "a")
        second = self.notes.create("two", "#000000", "a")
        self.assertEqual([n.id for n in self.notes.get_all()], [second.id, first.id])


class TestSchema(unittest.TestCase):
    def test_check_connection(self):
        with tempfile.TemporaryDirectory() as td:
            db_path = Path(td) / "sub" / "x.db"
            init_database(db_path).close()
            check_connection(db_path)

    def test_init_is_idempotent(self):
        with tempfile.TemporaryDirectory() as td:
            db_path = Path(td) / "x.db"
            init_database(db_path).close()
            conn = init_database(db_path)
            try:
                tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
            finally:
                conn.close()
            self.assertTrue({"panels", "widgets", "notes"} <= tables)

    def test_foreign_keys_enforced(self):
        with tempfile.TemporaryDirectory() as td:
            db_path = Path(td) / "x.db"
            init_database(db_path).close()
            conn = get_connection(db_path)
            try:
                with self.assertRaises(sqlite3.IntegrityError):
                    conn.execute(
                        "INSERT INTO widgets (widget_id, panel_key, title) VALUES (1, 'ghost', 'x')"
                    )
            finally:
                conn.close()


if __name__ == "__main__":
    unittest.main(verbosity=2)
