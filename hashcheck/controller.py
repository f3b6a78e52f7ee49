from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional, Sequence

from .factory import ProberFactory
from .models import Observation, TargetState

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 3


class ProbeScheduler:
    """Probes a batch of targets on a bounded thread pool.

    run_all() is a barrier: it returns only after every target in the batch
    has been probed exactly once. The pool lives for one batch, so the
    worker bound applies per batch.
    """

    def __init__(self, factory: ProberFactory, workers: Optional[int] = None) -> None:
        self._factory = factory
        self._workers = workers if workers and workers > 0 else DEFAULT_WORKERS

    @property
    def workers(self) -> int:
        return self._workers

    @property
    def factory(self) -> ProberFactory:
        return self._factory

    def run_all(self, states: Sequence[TargetState]) -> List[Observation]:
        """Probe every state and block until all of them have completed."""
        if not states:
            return []

        logger.debug("probing %d targets with %d workers", len(states), self._workers)
        with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="probe") as executor:
            futures = [executor.submit(self._probe_one, state) for state in states]
            wait(futures)

        # Probers log their own failures; anything raised here is a bug and
        # surfaces only after the whole batch has finished.
        return [fut.result() for fut in futures]

    def _probe_one(self, state: TargetState) -> Observation:
        prober = self._factory.create_prober(state.target)
        return prober.probe(state)
