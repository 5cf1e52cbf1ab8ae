import json
import logging
import tempfile
import unittest
from pathlib import Path

from teams_callflow.core.config_loader import RenderOptions, graph_token, load_options, options_from_env
from teams_callflow.core.logging_config import LOGGER_NAME, setup_logging
from teams_callflow.core.paths import asset_path, default_diagram_path, sanitize_filename
from teams_callflow.errors import ConfigurationAmbiguityError


class ConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        options = load_options(env={})
        self.assertEqual(options, RenderOptions())
        self.assertEqual(options.truncate_greetings, 20)
        self.assertTrue(options.show_queue_settings)

    def test_file_then_environment(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "options.json"
            path.write_text(json.dumps({"show_tts_text": True, "truncate_greetings": 40, "direction": "LR"}),
                            encoding="utf-8")
            options = load_options(str(path), env={"TEAMS_CALLFLOW_TRUNCATE_GREETINGS": "10"})
        self.assertTrue(options.show_tts_text)
        self.assertEqual(options.truncate_greetings, 10)
        self.assertEqual(options.direction, "LR")

    def test_bad_values_are_rejected(self) -> None:
        with self.assertRaises(ConfigurationAmbiguityError):
            options_from_env({"TEAMS_CALLFLOW_SHOW_TTS_TEXT": "maybe"})
        with self.assertRaises(ConfigurationAmbiguityError):
            options_from_env({"TEAMS_CALLFLOW_TRUNCATE_GREETINGS": "lots"})

    def test_graph_token(self) -> None:
        self.assertEqual(graph_token({"TEAMS_CALLFLOW_GRAPH_TOKEN": "t0k"}), "t0k")
        self.assertIsNone(graph_token({}))


class PathTests(unittest.TestCase):
    def test_asset_paths(self) -> None:
        self.assertEqual(asset_path("assets", "aa1_greeting_1"), str(Path("assets") / "aa1_greeting_1.txt"))
        self.assertEqual(asset_path("assets", "cq1_cqGreeting", "hold music.mp3"),
                         str(Path("assets") / "cq1_cqGreeting_hold_music.mp3"))

    def test_sanitize_and_default_diagram_path(self) -> None:
        self.assertEqual(sanitize_filename('Main: "Line"'), "Main___Line_")
        with tempfile.TemporaryDirectory() as td:
            self.assertTrue(default_diagram_path(td, "Main Line", "dot").endswith("Main_Line.dot"))
            self.assertTrue(default_diagram_path(td, "Main Line", "mermaid").endswith("Main_Line.mmd"))


class LoggingTests(unittest.TestCase):
    def test_setup_logging_levels_and_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            log_file = Path(td) / "run.log"
            logger = setup_logging(debug=True, log_file=str(log_file))
            try:
                self.assertEqual(logger.name, LOGGER_NAME)
                self.assertEqual(logger.level, logging.DEBUG)
                self.assertEqual(len(logger.handlers), 2)
                logger.info("hello")
            finally:
                for handler in list(logger.handlers):
                    handler.close()
                    logger.removeHandler(handler)
            self.assertIn("hello", log_file.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
