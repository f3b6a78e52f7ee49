"""Tests for the command-line entry point."""

import os
import tempfile
import threading
import unittest
from unittest.mock import patch

import main
from hashcheck.exporter import OnDemandExporter, SnapshotExporter, Watcher

CONFIG = "workers: 4\ntargets:\n  - url: https://a.example\n    hash: abc\n"


def _write_config(test: unittest.TestCase) -> str:
    fd, path = tempfile.mkstemp(suffix=".yml")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(CONFIG)
    test.addCleanup(os.remove, path)
    return path


class TestBuildHandler(unittest.TestCase):
    """Verify that each mode builds the matching handler."""

    def setUp(self):
        self.path = _write_config(self)

    def _args(self, *argv):
        return main.build_parser().parse_args(["--config", self.path, *argv])

    def test_watch_mode(self):
        handler = main.build_handler(self._args())
        self.assertIsInstance(handler, Watcher)
        self.assertFalse(handler.interval_driven)
        self.assertEqual([s.url for s in handler.states], ["https://a.example"])

    def test_watch_mode_with_interval(self):
        handler = main.build_handler(self._args("--interval", "30"))
        self.assertTrue(handler.interval_driven)

    def test_snapshot_mode(self):
        handler = main.build_handler(self._args("--mode", "snapshot"))
        self.assertIsInstance(handler, SnapshotExporter)

    def test_on_demand_needs_no_config(self):
        args = main.build_parser().parse_args(["--mode", "on-demand", "--config", "/nonexistent.yml"])
        self.assertIsInstance(main.build_handler(args), OnDemandExporter)


class TestMain(unittest.TestCase):
    """Verify exit codes for fatal startup errors."""

    def test_missing_config_exits_non_zero(self):
        with patch("main.setup_logging"):
            self.assertEqual(main.main(["--config", "/nonexistent/hashcheck.yml"]), 1)

    def test_bad_listen_address_exits_non_zero(self):
        with patch("main.setup_logging"):
            self.assertEqual(main.main(["--mode", "on-demand", "--listen", "nowhere"]), 1)

    def test_serves_handler(self):
        with patch("main.setup_logging"), patch("main.serve") as serve:
            self.assertEqual(main.main(["--mode", "on-demand", "--listen", "127.0.0.1:0"]), 0)
        handler, addr = serve.call_args[0]
        self.assertIsInstance(handler, OnDemandExporter)
        self.assertEqual(addr, "127.0.0.1:0")

    def test_interval_rejected_outside_watch_mode(self):
        for mode in ("snapshot", "on-demand"):
            with patch("sys.stderr"), self.assertRaises(SystemExit):
                main.main(["--mode", mode, "--interval", "30"])

    def test_negative_interval_rejected(self):
        with patch("sys.stderr"), self.assertRaises(SystemExit):
            main.main(["--interval", "-1"])

    def test_poller_stopped_and_joined_on_bind_failure(self):
        """A failed bind stops the background poller before main returns."""
        path = _write_config(self)
        with patch("main.setup_logging"), patch.object(Watcher, "probe"), patch(
            "main.serve", side_effect=OSError("address in use")
        ):
            code = main.main(["--config", path, "--interval", "30"])
        self.assertEqual(code, 1)
        self.assertFalse(any(t.name == "poller" and t.is_alive() for t in threading.enumerate()))


if __name__ == "__main__":
    unittest.main()
