from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Target:
    url: str
    expected_hash: str = ""
    impersonate: Optional[str] = None

    @property
    def verifies(self) -> bool:
        return bool(self.expected_hash)


@dataclass
class Observation:
    """Latest probe outcome for one target.

    Defaults are the failure state. Each probe cycle fills a new
    Observation and swaps it into the TargetState when done."""

    status_code: int = 0
    response_bytes: int = 0
    duration_seconds: float = 0.0
    digest: str = ""
    success: bool = False
    correct: bool = False


@dataclass
class TargetState:
    """A target together with its observation and digest history.

    last_digest and change_count survive observation swaps and failed probes; they
    only mean something when the same TargetState is probed repeatedly."""

    target: Target
    observation: Observation = field(default_factory=Observation)
    last_digest: Optional[str] = None
    change_count: int = 0

    @property
    def url(self) -> str:
        return self.target.url

    def record_digest(self, value: str) -> bool:
        """Store value as the last known digest, counting it if it differs from a prior one."""
        changed = self.last_digest is not None and self.last_digest != value
        if changed:
            self.change_count += 1
        self.last_digest = value
        return changed
