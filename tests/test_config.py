from __future__ import annotations

import logging
import logging.handlers
import os
import tempfile
import unittest
from unittest import mock

from clite.config import DEFAULT_CONFIG, config_path, deep_merge, load_config
from clite.constants import ESC
from clite.keys import IDLE, DecodeState, Phase, transition
from clite.log import KEY_LOGGER, setup_logging


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = os.path.join(self.tmp.name, "config.toml")

    def write(self, text: str) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)

    def test_missing_file_gives_defaults(self) -> None:
        self.assertEqual(load_config(self.path), DEFAULT_CONFIG)

    def test_user_values_are_merged_onto_defaults(self) -> None:
        self.write('[editor]\ntab_stop = 4\n\n[logging]\nlevel = "DEBUG"\n')
        config = load_config(self.path)
        self.assertEqual(config["editor"]["tab_stop"], 4)
        self.assertEqual(config["editor"]["quit_times"], 3)
        self.assertEqual(config["logging"]["level"], "DEBUG")
        self.assertEqual(config["logging"]["file"], "")

    def test_invalid_values_fall_back(self) -> None:
        self.write('[editor]\ntab_stop = 0\nquit_times = "many"\nmessage_timeout = true\n')
        with self.assertLogs("clite.config", level="WARNING"):
            config = load_config(self.path)
        self.assertEqual(config["editor"], DEFAULT_CONFIG["editor"])

    def test_non_table_section_falls_back(self) -> None:
        self.write('editor = 5\n')
        with self.assertLogs("clite.config", level="WARNING"):
            config = load_config(self.path)
        self.assertEqual(config["editor"], DEFAULT_CONFIG["editor"])

    def test_parse_error_gives_defaults(self) -> None:
        self.write("[editor\ntab_stop = ")
        with self.assertLogs("clite.config", level="ERROR"):
            config = load_config(self.path)
        self.assertEqual(config, DEFAULT_CONFIG)

    def test_environment_selects_file(self) -> None:
        self.write("[editor]\nquit_times = 5\n")
        with mock.patch.dict(os.environ, {"CLITE_CONFIG": self.path}):
            self.assertEqual(config_path(), self.path)
            self.assertEqual(load_config()["editor"]["quit_times"], 5)

    def test_deep_merge_leaves_inputs_alone(self) -> None:
        base = {"a": {"b": 1, "c": 2}}
        merged = deep_merge(base, {"a": {"b": 9}, "d": 4})
        self.assertEqual(merged, {"a": {"b": 9, "c": 2}, "d": 4})
        self.assertEqual(base, {"a": {"b": 1, "c": 2}})


class LoggingSetupTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.addCleanup(self._reset)

    @staticmethod
    def _reset() -> None:
        logger = logging.getLogger("clite")
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
        logging.getLogger(KEY_LOGGER).disabled = False

    def test_without_file_records_are_discarded(self) -> None:
        with mock.patch.dict(os.environ, {"CLITE_LOG": ""}):
            setup_logging(DEFAULT_CONFIG)
        handlers = logging.getLogger("clite").handlers
        self.assertEqual(len(handlers), 1)
        self.assertIsInstance(handlers[0], logging.NullHandler)
        self.assertTrue(logging.getLogger(KEY_LOGGER).disabled)

    def test_file_handler_and_key_trace(self) -> None:
        path = os.path.join(self.tmp.name, "clite.log")
        config = deep_merge(
            DEFAULT_CONFIG, {"logging": {"file": path, "level": "info", "keytrace": True}}
        )
        setup_logging(config)
        logger = logging.getLogger("clite")
        self.assertIsInstance(logger.handlers[0], logging.handlers.RotatingFileHandler)
        self.assertEqual(logger.level, logging.INFO)
        self.assertFalse(logging.getLogger(KEY_LOGGER).disabled)

        logging.getLogger("clite.editor").info("hello from the editor")
        logger.handlers[0].flush()
        with open(path, encoding="utf-8") as f:
            self.assertIn("hello from the editor", f.read())

    def test_decoder_debug_records_do_not_need_key_trace(self) -> None:
        path = os.path.join(self.tmp.name, "clite.log")
        config = deep_merge(DEFAULT_CONFIG, {"logging": {"file": path, "level": "DEBUG"}})
        with mock.patch.dict(os.environ, {"CLITE_KEYTRACE": ""}):
            setup_logging(config)
        self.assertTrue(logging.getLogger(KEY_LOGGER).disabled)

        state, key = transition(DecodeState(Phase.ESCAPE), ord("x"))
        self.assertEqual((state, key), (IDLE, ESC))
        logging.getLogger("clite").handlers[0].flush()
        with open(path, encoding="utf-8") as f:
            self.assertIn("unrecognized sequence", f.read())

    def test_repeated_setup_closes_previous_handlers(self) -> None:
        path = os.path.join(self.tmp.name, "clite.log")
        setup_logging(deep_merge(DEFAULT_CONFIG, {"logging": {"file": path}}))
        first = logging.getLogger("clite").handlers[0]
        with mock.patch.dict(os.environ, {"CLITE_LOG": ""}):
            setup_logging(DEFAULT_CONFIG)
        self.assertNotIn(first, logging.getLogger("clite").handlers)
        self.assertIsNone(first.stream)


if __name__ == "__main__":
    unittest.main()
