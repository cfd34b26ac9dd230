# enhance_relay/store.py
# In-memory job registry. Records live only as long as the process; each finished
# job gets a one-shot call_later timer that drops it, and a stopping loop just
# discards pending timers.

import asyncio
import logging
from typing import Dict, Optional

from .models import Job

logger = logging.getLogger(__name__)


class JobStore:
    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    def create(self, job_id: str, job: Job) -> None:
        self._jobs[job_id] = job

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def replace(self, job_id: str, job: Job) -> None:
        # a job evicted in the meantime stays gone
        if job_id not in self._jobs:
            return
        self._jobs[job_id] = job

    def schedule_eviction(self, job_id: str, delay: float) -> None:
        """Drop ``job_id`` after ``delay`` seconds. Must run inside the event loop."""
        loop = asyncio.get_running_loop()
        self._timers[job_id] = loop.call_later(delay, self._evict, job_id)

    def _evict(self, job_id: str) -> None:
        self._timers.pop(job_id, None)
        if self._jobs.pop(job_id, None) is not None:
            logger.debug("Evicted job %s", job_id)

    def close(self) -> None:
        """Cancel armed eviction timers."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
