import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from panelboard.config import Config
from panelboard.logging_config import setup_logging


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = Config()
        self.assertEqual((config.grid_rows, config.grid_cols, config.min_widget_span), (8, 6, 1))
        self.assertEqual(config.port, 8050)
        self.assertEqual(config.db_path.name, "panelboard.db")
        self.assertTrue(config.db_path.is_absolute())

    def test_validation(self):
        for kwargs in (
            {"grid_rows": 1},
            {"grid_cols": 0},
            {"min_widget_span": 0},
            {"log_level": "LOUD"},
            {"theme": "neon"},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    Config(**kwargs)

    def test_log_level_is_normalized(self):
        config = Config(log_level="debug")
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.log_level_value, logging.DEBUG)

    def test_from_env_reads_prefixed_variables(self):
        env = {
            "PANELBOARD_PORT": "9000",
            "PANELBOARD_DEBUG": "yes",
            "PANELBOARD_GRID_ROWS": "10",
            "PANELBOARD_CORS_ORIGINS": "http://a.test, http://b.test",
        }
        with mock.patch.dict(os.environ, env), mock.patch("panelboard.config.load_dotenv"):
            config = Config.from_env()
        self.assertEqual(config.port, 9000)
        self.assertTrue(config.debug)
        self.assertEqual(config.grid_rows, 10)
        self.assertEqual(config.cors_origins, ["http://a.test", "http://b.test"])

    def test_overrides_beat_environment(self):
        with mock.patch.dict(os.environ, {"PANELBOARD_PORT": "9000"}), \
                mock.patch("panelboard.config.load_dotenv"):
            self.assertEqual(Config.from_env(port=7000, host=None).port, 7000)

    def test_to_dict(self):
        data = Config(db_path="x.db").to_dict()
        self.assertEqual(data["db_path"], str(Path("x.db").resolve()))
        self.assertIsNone(data["log_file"])


class TestLogging(unittest.TestCase):
    def test_setup_logging_writes_file(self):
        with tempfile.TemporaryDirectory() as td:
            log_file = Path(td) / "panelboard.log"
            logger = setup_logging("DEBUG", log_file)
            try:
                logging.getLogger("panelboard.test").info("hello from test")
                for handler in logger.handlers:
                    handler.flush()
                self.assertIn("hello from test", log_file.read_text(encoding="utf-8"))
                self.assertFalse(logger.propagate)
            finally:
                for handler in list(logger.handlers):
                    handler.close()
                    logger.removeHandler(handler)

    def test_setup_logging_does_not_stack_handlers(self):
        logger = setup_logging(logging.INFO)
        setup_logging(logging.INFO)
        self.assertEqual(len(logger.handlers), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
