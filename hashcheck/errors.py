from __future__ import annotations


class HashcheckError(Exception):
    """Base class for exporter errors."""


class ConfigError(HashcheckError):
    """Configuration file is missing, unreadable or invalid."""


class BadRequest(HashcheckError):
    """A scrape request is missing required parameters."""
