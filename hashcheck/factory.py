from __future__ import annotations

import threading
from typing import Dict

from .base import BaseProber, DEFAULT_TIMEOUT
from .models import Target
from .probers import CurlProber, RequestsProber


class ProberFactory:
    """Picks the prober for a target.

    Probers carry no per-target state, so one instance per kind is cached and
    shared by all worker threads. Targets with an impersonate profile go
    through curl_cffi, everything else through requests.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout
        self._lock = threading.Lock()
        self._cache: Dict[str, BaseProber] = {}

    @property
    def timeout(self) -> float:
        return self._timeout

    def create_prober(self, target: Target) -> BaseProber:
        kind = "curl" if target.impersonate else "requests"
        with self._lock:
            if kind in self._cache:
                return self._cache[kind]

            if kind == "curl":
                prober: BaseProber = CurlProber(timeout=self._timeout)
            else:
                prober = RequestsProber(timeout=self._timeout)

            self._cache[kind] = prober
            return prober
