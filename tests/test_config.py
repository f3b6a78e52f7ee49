"""Tests for configuration loading."""

import os
import tempfile
import unittest

from hashcheck.config import load_config, parse_config
from hashcheck.controller import DEFAULT_WORKERS
from hashcheck.errors import ConfigError
from hashcheck.models import Target


class TestLoadConfig(unittest.TestCase):
    """Verify reading YAML files from disk."""

    def _write(self, text: str) -> str:
        fd, path = tempfile.mkstemp(suffix=".yml")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_list_form(self):
        path = self._write(
            "workers: 5\n"
            "timeout: 2.5\n"
            "targets:\n"
            "  - url: https://a.example\n"
            "    hash: ABCDEF\n"
            "  - url: https://b.example\n"
            "    impersonate: chrome120\n"
        )
        config = load_config(path)
        self.assertEqual(config.workers, 5)
        self.assertEqual(config.timeout, 2.5)
        self.assertEqual(
            config.targets,
            [
                Target(url="https://a.example", expected_hash="ABCDEF"),
                Target(url="https://b.example", impersonate="chrome120"),
            ],
        )

    def test_map_form(self):
        path = self._write("https://a.example: abcdef\nhttps://b.example:\n")
        config = load_config(path)
        self.assertEqual(config.workers, DEFAULT_WORKERS)
        self.assertEqual(
            config.targets,
            [Target(url="https://a.example", expected_hash="abcdef"), Target(url="https://b.example")],
        )

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config("/nonexistent/hashcheck.yml")

    def test_invalid_yaml(self):
        path = self._write("targets: [unclosed\n")
        with self.assertRaises(ConfigError):
            load_config(path)


class TestParseConfig(unittest.TestCase):
    """Verify validation of decoded data."""

    def test_empty_document(self):
        self.assertEqual(parse_config(None).targets, [])

    def test_non_positive_workers_default(self):
        config = parse_config({"workers": 0, "targets": []})
        self.assertEqual(config.workers, DEFAULT_WORKERS)

    def test_rejects_non_mapping(self):
        with self.assertRaises(ConfigError):
            parse_config(["https://a.example"])

    def test_rejects_target_without_url(self):
        with self.assertRaises(ConfigError) as ctx:
            parse_config({"targets": [{"hash": "abc"}]})
        self.assertIn("url", str(ctx.exception))

    def test_rejects_bad_workers(self):
        with self.assertRaises(ConfigError):
            parse_config({"workers": "many", "targets": []})

    def test_rejects_bad_timeout(self):
        with self.assertRaises(ConfigError):
            parse_config({"timeout": -1, "targets": []})

    def test_rejects_duplicate_urls(self):
        with self.assertRaises(ConfigError):
            parse_config({"targets": [{"url": "https://a.example"}, {"url": "https://a.example"}]})

    def test_rejects_non_string_hash_in_map(self):
        with self.assertRaises(ConfigError):
            parse_config({"https://a.example": 12})


if __name__ == "__main__":
    unittest.main()
