"""Unit tests for settings helpers and JSON logging."""
from __future__ import annotations

import json
import logging
import sys
import unittest

from hls_adapter.core.config import Settings
from hls_adapter.core.logging_cfg import JsonFormatter, extra_fields


class TestSettings(unittest.TestCase):
    """Tests for Settings helper methods."""

    def test_resolve_line_ending(self) -> None:
        """Auto mode follows the upstream document; lf/crlf force a convention."""
        self.assertEqual(Settings(line_ending="auto").resolve_line_ending("a\r\nb"), "\r\n")
        self.assertEqual(Settings(line_ending="auto").resolve_line_ending("a\nb"), "\n")
        self.assertEqual(Settings(line_ending="lf").resolve_line_ending("a\r\nb"), "\n")
        self.assertEqual(Settings(line_ending="crlf").resolve_line_ending("a\nb"), "\r\n")

    def test_is_playlist_path(self) -> None:
        """Only configured suffixes are adapted, case-insensitively."""
        settings: Settings = Settings()
        self.assertTrue(settings.is_playlist_path("live/master.m3u8"))
        self.assertTrue(settings.is_playlist_path("LIVE/MASTER.M3U8"))
        self.assertFalse(settings.is_playlist_path("live/seg1.ts"))
        custom: Settings = Settings(playlist_suffixes=[".m3u8", ".m3u"])
        self.assertTrue(custom.is_playlist_path("radio.m3u"))


class TestJsonFormatter(unittest.TestCase):
    """Tests for the JSON log formatter."""

    def test_formats_record_as_json(self) -> None:
        """Records become single-line JSON objects with the standard keys."""
        record: logging.LogRecord = logging.LogRecord(
            "hls_adapter.test", logging.INFO, __file__, 10, "hello %s", ("edge",), None
        )
        payload: dict = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["message"], "hello edge")
        self.assertEqual(payload["logger"], "hls_adapter.test")
        self.assertEqual(payload["where"], "test_config:None:10")
        self.assertNotIn("exc", payload)

    def test_includes_exception(self) -> None:
        """Exception info is rendered under ``exc``."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()
        record: logging.LogRecord = logging.LogRecord(
            "hls_adapter.test", logging.ERROR, __file__, 20, "failed", (), exc_info
        )
        payload: dict = json.loads(JsonFormatter().format(record))
        self.assertIn("RuntimeError: boom", payload["exc"])

    def test_extra_fields_become_top_level_keys(self) -> None:
        """Fields passed with ``extra=`` are emitted next to the standard keys."""
        record: logging.LogRecord = logging.getLogger("hls_adapter.test").makeRecord(
            "hls_adapter.test",
            logging.DEBUG,
            __file__,
            30,
            "Adapting playlist",
            (),
            None,
            extra={"variants": 3, "order": "CappedBest", "cap_enabled": False, "cap_dimension": 1280},
        )
        payload: dict = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["variants"], 3)
        self.assertEqual(payload["order"], "CappedBest")
        self.assertIs(payload["cap_enabled"], False)
        self.assertEqual(payload["cap_dimension"], 1280)
        self.assertNotIn("args", payload)
        self.assertNotIn("levelno", payload)

    def test_extra_fields_do_not_clobber_standard_keys(self) -> None:
        """A clashing extra is prefixed and values that are not JSON types are stringified."""
        record: logging.LogRecord = logging.getLogger("hls_adapter.test").makeRecord(
            "hls_adapter.test",
            logging.INFO,
            __file__,
            40,
            "real message",
            (),
            None,
            extra={"level": "fake", "policy": object},
        )
        payload: dict = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["extra_level"], "fake")
        self.assertEqual(payload["policy"], str(object))
        self.assertEqual(extra_fields(record)["level"], "fake")


if __name__ == "__main__":
    unittest.main()
