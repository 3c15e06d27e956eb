import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from panelboard import __version__
from panelboard.cli import app
from panelboard.db.repository import PanelRepository

runner = CliRunner()


class TestCli(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.td = Path(self._td.name)
        self.db = str(self.td / "cli.db")

    def tearDown(self):
        self._td.cleanup()

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_seed_then_refuse_without_force(self):
        result = runner.invoke(app, ["seed", "--db", self.db])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(list(PanelRepository(Path(self.db)).get_all_panels()), ["center", "left", "right"])

        result = runner.invoke(app, ["seed", "--db", self.db, "--template", "empty"])
        self.assertEqual(result.exit_code, 1)

        result = runner.invoke(app, ["seed", "--db", self.db, "--template", "empty", "--force"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(PanelRepository(Path(self.db)).get_all_panels(), {})

    def test_seed_unknown_template(self):
        result = runner.invoke(app, ["seed", "--db", self.db, "--template", "fancy"])
        self.assertEqual(result.exit_code, 1)

    def test_export_import_round_trip(self):
        runner.invoke(app, ["seed", "--db", self.db])
        out = self.td / "layout.json"

        result = runner.invoke(app, ["export", str(out), "--db", self.db])
        self.assertEqual(result.exit_code, 0, result.output)
        document = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(document["version"], "1.0")
        self.assertEqual(len(document["panels"]["left"]["widgets"]), 4)

        other_db = str(self.td / "other.db")
        result = runner.invoke(app, ["import", str(out), "--db", other_db])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            PanelRepository(Path(other_db)).get_all_panels(),
            PanelRepository(Path(self.db)).get_all_panels(),
        )

    def test_import_rejects_invalid_layout(self):
        bad = self.td / "bad.json"
        bad.write_text(json.dumps({"panels": {"left": {"title": ""}}}), encoding="utf-8")
        result = runner.invoke(app, ["import", str(bad), "--db", self.db])
        self.assertEqual(result.exit_code, 1)

        bad.write_text("{oops", encoding="utf-8")
        result = runner.invoke(app, ["import", str(bad), "--db", self.db])
        self.assertEqual(result.exit_code, 1)

    def test_info(self):
        result = runner.invoke(app, ["info", "--db", self.db])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No panels saved", result.output)

        runner.invoke(app, ["seed", "--db", self.db])
        result = runner.invoke(app, ["info", "--db", self.db])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("center", result.output)
        self.assertIn("Grid occupancy", result.output)


if __name__ == "__main__":
    unittest.main(verbosity=2)
