from __future__ import annotations

import hashlib


def digest(data: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of data."""
    return hashlib.sha256(data).hexdigest()


def matches(actual: str, expected: str) -> bool:
    """Compare two hex digests ignoring case."""
    return actual.lower() == expected.lower()
