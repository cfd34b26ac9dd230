# enhance_relay/orchestrator.py
# submit() registers a job and hands the Replicate call to a detached asyncio task,
# so the HTTP handler answers first. The task reports back only through one
# JobStore.replace keyed by job id, then arms the eviction timer.

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Optional, Set

from .errors import JobNotFound, MissingInput
from .models import Job
from .provider import Provider
from .schemas import EnhanceRequest
from .store import JobStore

logger = logging.getLogger(__name__)

FALLBACK_ERROR = "Enhancement failed"
EMPTY_OUTPUT_ERROR = "Enhancement returned no image"


def extract_image_reference(output: Any) -> Optional[str]:
    """
    Reduce a provider output to one image reference.

    Accepts a plain URL, a list/tuple whose first item is the URL, a mapping
    with a "url" key, or an object exposing ``url`` (method or attribute).
    Returns None when nothing usable is found.
    """
    if output is None:
        return None
    if isinstance(output, str):
        return output or None
    if isinstance(output, (list, tuple)):
        return extract_image_reference(output[0]) if output else None
    if isinstance(output, Mapping):
        return extract_image_reference(output.get("url"))
    url = getattr(output, "url", None)
    if callable(url):
        url = url()
    if url is None:
        return None
    return str(url) or None


class EnhancementOrchestrator:
    def __init__(self, store: JobStore, provider: Provider, retention_seconds: float):
        self.store = store
        self.provider = provider
        self.retention_seconds = retention_seconds
        # strong refs, otherwise the loop may garbage-collect running tasks
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, request: EnhanceRequest) -> Job:
        """Create a processing job and start enhancing it in the background."""
        if not request.image_url:
            raise MissingInput("Missing image_url")

        job = Job(input_image=request.image_url, scale=request.scale, face_enhance=request.face_enhance)
        self.store.create(job.id, job)
        logger.info("Created job %s for %s", job.id, job.input_image)

        task = asyncio.create_task(self._run(job.id), name=f"enhance-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    def poll(self, job_id: str) -> Job:
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFound("Job not found")
        return job

    async def drain(self) -> None:
        """Wait for every in-flight job to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run(self, job_id: str) -> None:
        job = self.store.get(job_id)
        if job is None:
            return

        input = {"image": job.input_image, "scale": job.scale, "face_enhance": job.face_enhance}
        logger.info("Running enhancement for job %s", job_id)
        try:
            output = await self.provider.run(input)
            logger.debug("Job %s output: %r", job_id, output)
            enhanced_image = extract_image_reference(output)
        except Exception as e:
            logger.exception("Enhancement error for job %s", job_id)
            finished = job.fail(str(e) or FALLBACK_ERROR)
        else:
            if enhanced_image:
                finished = job.succeed(enhanced_image)
            else:
                logger.warning("Job %s: provider returned no image (%r)", job_id, output)
                finished = job.fail(EMPTY_OUTPUT_ERROR)

        self.store.replace(job_id, finished)
        self.store.schedule_eviction(job_id, self.retention_seconds)
        logger.info("Job %s finished with status %s", job_id, finished.status.value)
