"""Tests for the ProberFactory class."""

import unittest

from hashcheck.factory import ProberFactory
from hashcheck.models import Target
from hashcheck.probers import CurlProber, RequestsProber


class TestProberFactory(unittest.TestCase):
    """Verify that the factory creates the correct prober type."""

    def setUp(self):
        """Set up shared factory instance."""
        self.factory = ProberFactory(timeout=7.0)

    def test_plain_target_uses_requests(self):
        prober = self.factory.create_prober(Target(url="https://example.com"))
        self.assertIsInstance(prober, RequestsProber)
        self.assertEqual(prober.timeout, 7.0)

    def test_impersonated_target_uses_curl(self):
        prober = self.factory.create_prober(Target(url="https://example.com", impersonate="chrome120"))
        self.assertIsInstance(prober, CurlProber)

    def test_probers_are_cached_per_kind(self):
        """Probers are stateless, so the same instance is reused."""
        first = self.factory.create_prober(Target(url="https://a.example.com"))
        second = self.factory.create_prober(Target(url="https://b.example.com"))
        self.assertIs(first, second)


if __name__ == "__main__":
    unittest.main()
