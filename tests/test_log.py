from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from loguru import logger

from vuit import log as log_mod


class LoggingSetupTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger.remove()

    def test_resolve_log_level_normalizes_and_falls_back(self) -> None:
        self.assertEqual(log_mod.resolve_log_level("debug"), "DEBUG")
        self.assertEqual(log_mod.resolve_log_level("chatty"), "WARNING")
        self.assertEqual(log_mod.resolve_log_level(""), "WARNING")

    def test_level_comes_from_environment_by_default(self) -> None:
        with mock.patch.dict("vuit.log.os.environ", {"VUIT_LOG_LEVEL": "info"}):
            self.assertEqual(log_mod.resolve_log_level(), "INFO")

    def test_configure_logging_writes_to_file_sink(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "logs" / "vuit.log"

            returned = log_mod.configure_logging(target, level="INFO")
            logger.info("hello from the session")
            logger.complete()
            logger.remove()

            self.assertEqual(returned, target)
            self.assertIn("hello from the session", target.read_text(encoding="utf-8"))

    def test_unwritable_directory_disables_logging(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("", encoding="utf-8")

            self.assertIsNone(log_mod.configure_logging(blocker / "vuit.log"))


if __name__ == "__main__":
    unittest.main()
