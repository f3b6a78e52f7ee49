from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from .digest import digest, matches
from .models import Observation, Target, TargetState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class BaseProber(ABC):
    """Abstract base class defining the probe pipeline for one target.

    Subclasses supply fetch() and read_body(); probe() owns timing, a fresh
    observation per cycle, digesting, change detection and verification. Per-target failures
    are logged and reflected in the observation, never raised.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    def probe(self, state: TargetState) -> Observation:
        obs = Observation()
        try:
            self._run(state, obs)
        finally:
            # Published in one assignment so a concurrent render never sees a
            # half-filled observation.
            state.observation = obs
        return obs

    def _run(self, state: TargetState, obs: Observation) -> None:
        target = state.target
        start = time.perf_counter()
        try:
            response = self.fetch(target)
        except Exception as exc:  # noqa: BLE001
            obs.duration_seconds = time.perf_counter() - start
            logger.error("failed to fetch [%s]: %s", target.url, exc)
            return
        obs.duration_seconds = time.perf_counter() - start
        obs.status_code = int(response.status_code)

        try:
            body = self.read_body(response)
        except Exception as exc:  # noqa: BLE001
            logger.error("failed to read body of [%s]: %s", target.url, exc)
            return
        finally:
            self.close(response)

        obs.response_bytes = len(body)
        obs.digest = digest(body)
        obs.success = True

        if state.record_digest(obs.digest):
            logger.info("[%s]: content changed (changes=%d)", target.url, state.change_count)

        if target.verifies:
            if matches(obs.digest, target.expected_hash):
                obs.correct = True
            else:
                logger.error(
                    "[%s]: hash is incorrect: expected=%s actual=%s",
                    target.url,
                    target.expected_hash,
                    obs.digest,
                )

    @abstractmethod
    def fetch(self, target: Target) -> Any:
        """Issue the request and return once the response headers are available."""
        ...

    @abstractmethod
    def read_body(self, response: Any) -> bytes:
        ...

    def close(self, response: Any) -> None:
        closer = getattr(response, "close", None)
        if callable(closer):
            closer()
