"""
Background task runner.

In-process worker pool for the side effects of feed and engagement
requests. Started and stopped by the FastAPI lifespan and handed to
handlers through a dependency.

Flow:
=====
    handler ──submit()──► asyncio.Queue (bounded) ──► worker 1..N ──► processor.process()
                │                                          │
                └─ queue full → job dropped, warning       └─ failure → retry with
                                                              linear backoff, then
                                                              log and discard

Guarantees:
===========
- submit() never blocks and never raises into the request
- a job is attempted at most 1 + max_retries times
- stop() waits for queued jobs up to a timeout, then cancels the workers

Usage:
======
    runner = BackgroundTaskRunner(SideEffectProcessor(AsyncSessionLocal))
    await runner.start()
    runner.submit(BackgroundJob.MARK_SEEN, user_id=str(user_id), anchor_id=str(anchor_id))
    await runner.stop()
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from src.config.settings import settings
from src.shared.core.logging import get_logger, bind_log_context
from src.shared.models.enums import BackgroundJob

logger = get_logger(__name__)


class JobProcessor(Protocol):
    async def process(self, job_type: BackgroundJob, payload: dict[str, Any]) -> None: ...


@dataclass
class Job:
    """A queued unit of background work."""

    job_type: BackgroundJob
    payload: dict[str, Any] = field(default_factory=dict)


class BackgroundTaskRunner:
    """
    Bounded queue plus a fixed set of worker tasks.

    Attributes:
        processor: Executes jobs by type
        worker_count: Number of concurrent workers
        queue_size: Jobs that may wait before submissions are dropped
        max_retries: Extra attempts after the first failure
        retry_delay: Base backoff in seconds (attempt n waits n * retry_delay)
    """

    def __init__(
        self,
        processor: JobProcessor,
        *,
        worker_count: int = settings.BACKGROUND_WORKER_COUNT,
        queue_size: int = settings.BACKGROUND_QUEUE_SIZE,
        max_retries: int = settings.BACKGROUND_MAX_RETRIES,
        retry_delay: float = settings.BACKGROUND_RETRY_DELAY_SECONDS,
    ):
        self.processor = processor
        self.worker_count = worker_count
        self.queue_size = queue_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._queue: Optional[asyncio.Queue[Job]] = None
        self._workers: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════════

    async def start(self) -> None:
        """Create the queue and spawn the workers."""
        if self.running:
            return

        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._workers = [
            asyncio.create_task(self._worker(index + 1), name=f"background-worker-{index + 1}")
            for index in range(self.worker_count)
        ]
        logger.info("Background task runner started", workers=self.worker_count, queue_size=self.queue_size)

    async def drain(self) -> None:
        """Wait until every queued job has finished (including retries)."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self, timeout: float = settings.BACKGROUND_SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Let queued jobs finish for up to ``timeout`` seconds, then cancel the workers."""
        if not self.running:
            return

        try:
            await asyncio.wait_for(self.drain(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Background jobs still pending at shutdown", pending=self.pending)

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Background task runner stopped")

    # ═══════════════════════════════════════════════════════════════════════════
    # SUBMISSION
    # ═══════════════════════════════════════════════════════════════════════════

    def submit(self, job_type: BackgroundJob, **payload: Any) -> bool:
        """
        Queue a job without waiting.

        Returns:
            True if queued; False if the runner is stopped or the queue is full
        """
        if not self.running or self._queue is None:
            logger.warning("Background job dropped, runner not running", job_type=job_type.value)
            return False

        try:
            self._queue.put_nowait(Job(job_type=job_type, payload=payload))
        except asyncio.QueueFull:
            logger.warning("Background job dropped, queue full", job_type=job_type.value, queue_size=self.queue_size)
            return False
        return True

    # ═══════════════════════════════════════════════════════════════════════════
    # WORKERS
    # ═══════════════════════════════════════════════════════════════════════════

    async def _worker(self, worker_id: int) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                with bind_log_context(worker_id=worker_id, job_type=job.job_type.value):
                    await self._run(job)
            finally:
                self._queue.task_done()

    async def _run(self, job: Job) -> None:
        attempts = 1 + self.max_retries
        for attempt in range(1, attempts + 1):
            try:
                await self.processor.process(job.job_type, job.payload)
                return
            except Exception as e:
                if attempt == attempts:
                    logger.error(
                        "Background job failed, discarding",
                        attempts=attempt,
                        payload=job.payload,
                        error=str(e),
                        exc_info=True,
                    )
                    return
                logger.warning("Background job failed, retrying", attempt=attempt, error=str(e))
                await asyncio.sleep(self.retry_delay * attempt)
