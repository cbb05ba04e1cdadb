"""
Background Job Tracker

In-memory registry of asynchronous work items and the asyncio worker pool
that runs them. Jobs let an HTTP request hand off long running work (such
as a batch city import) and return immediately with a pollable handle.

Lifecycle::

    pending -> processing -> completed
                          -> failed

``completed`` and ``failed`` are terminal. Job state lives for the lifetime
of the process only.
"""

import asyncio
import copy
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from destinations.utils.logger import get_logger
from destinations.utils.metrics import metrics

logger = get_logger(__name__)

JobWork = Callable[[], Awaitable[Any]]


class JobStatus(str, Enum):
    """Lifecycle states of a background job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Job:
    """Tracked handle for a unit of background work."""

    id: str
    type: str
    status: JobStatus = JobStatus.PENDING
    data: Any = None
    result: Any = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobTracker:
    """
    Registry of background jobs plus a queue-fed worker pool.

    The registry is guarded by a lock and readers always receive copies, so
    a poller never sees a transition half applied. Work submitted through
    ``process_job`` is queued and executed by ``worker_count`` asyncio tasks;
    the job id is the correlation key between the queue and the registry.
    """

    def __init__(
        self,
        worker_count: int = 1,
        job_timeout: Optional[float] = None,
        retention_seconds: Optional[float] = None,
        shutdown_grace: float = 5.0,
    ) -> None:
        self.worker_count = max(1, worker_count)
        self.job_timeout = job_timeout
        self.retention_seconds = retention_seconds
        self.shutdown_grace = shutdown_grace

        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self._queue: Optional["asyncio.Queue[Tuple[str, JobWork]]"] = None
        self._workers: List[asyncio.Task] = []

    # Registry

    def create_job(self, job_type: str, data: Any = None) -> Job:
        """Register a new pending job and return a snapshot of it."""
        now = _utcnow()
        job = Job(
            id=str(uuid.uuid4()),
            type=job_type,
            data=data,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._purge_expired_locked(now)
            self._jobs[job.id] = job
            snapshot = copy.copy(job)

        metrics.record_job_transition(job_type, JobStatus.PENDING.value)
        logger.info("Job created", job_id=job.id, job_type=job_type)
        return snapshot

    def get_job(self, job_id: str) -> Optional[Job]:
        """Look up a job by id; returns a snapshot or None."""
        with self._lock:
            job = self._jobs.get(job_id)
            return copy.copy(job) if job is not None else None

    def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        result: Any = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Move a job to ``status``.

        Unknown ids are ignored. A job that already reached a terminal state
        keeps it.
        """
        status = JobStatus(status)
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return
            if job.is_terminal:
                logger.warning(
                    "Ignoring transition out of terminal state",
                    job_id=job_id,
                    current_status=job.status.value,
                    requested_status=status.value,
                )
                return
            job.status = status
            job.updated_at = _utcnow()
            if result is not None:
                job.result = result
            if error is not None:
                job.error = error
            job_type = job.type

        metrics.record_job_transition(job_type, status.value)

    def stats(self) -> Dict[str, int]:
        """Number of tracked jobs per status."""
        counts = {status.value: 0 for status in JobStatus}
        with self._lock:
            for job in self._jobs.values():
                counts[job.status.value] += 1
        return counts

    def purge_expired(self) -> int:
        """Drop finished jobs older than the retention window."""
        with self._lock:
            return self._purge_expired_locked(_utcnow())

    def _purge_expired_locked(self, now: datetime) -> int:
        if not self.retention_seconds:
            return 0
        cutoff = now - timedelta(seconds=self.retention_seconds)
        expired = [
            job_id for job_id, job in self._jobs.items()
            if job.is_terminal and job.updated_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
        return len(expired)

    # Execution

    @property
    def is_running(self) -> bool:
        return bool(self._workers)

    def start(self) -> None:
        """Spawn the worker tasks on the running event loop."""
        if self._workers:
            return
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._workers = [
            loop.create_task(self._worker(index), name=f"job-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.info("Job workers started", worker_count=self.worker_count)

    def process_job(self, job_id: str, work: JobWork) -> None:
        """
        Schedule ``work`` for the job without blocking the caller.

        The worker moves the job to ``processing``, awaits ``work()`` and
        records either its result (``completed``) or the exception message
        (``failed``). Exceptions never escape the worker.
        """
        if not self._workers:
            self.start()
        self._queue.put_nowait((job_id, work))

    async def join(self) -> None:
        """Wait until every queued job has been run."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        """
        Stop the worker pool.

        Queued work gets ``shutdown_grace`` seconds to drain; whatever is
        still running afterwards is cancelled and whatever is still queued is
        marked failed.
        """
        if not self._workers:
            return

        if self.shutdown_grace > 0:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=self.shutdown_grace)
            except asyncio.TimeoutError:
                logger.warning("Job queue did not drain before shutdown")

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)

        while not self._queue.empty():
            job_id, _ = self._queue.get_nowait()
            self._queue.task_done()
            self.update_job_status(
                job_id, JobStatus.FAILED, error="Service shut down before the job ran"
            )

        self._workers = []
        self._queue = None
        logger.info("Job workers stopped")

    async def _worker(self, worker_index: int) -> None:
        while True:
            job_id, work = await self._queue.get()
            try:
                await self._run(job_id, work)
            finally:
                self._queue.task_done()

    async def _run(self, job_id: str, work: JobWork) -> None:
        job = self.get_job(job_id)
        if job is None or job.is_terminal:
            logger.warning("Skipping work for unknown or finished job", job_id=job_id)
            return

        log = logger.bind(job_id=job_id, job_type=job.type)
        self.update_job_status(job_id, JobStatus.PROCESSING)
        log.info("Job processing started")

        try:
            with metrics.track_job():
                if self.job_timeout:
                    result = await asyncio.wait_for(work(), timeout=self.job_timeout)
                else:
                    result = await work()
        except asyncio.TimeoutError:
            self.update_job_status(
                job_id,
                JobStatus.FAILED,
                error=f"Job timed out after {self.job_timeout:g} seconds",
            )
            log.warning("Job timed out", timeout=self.job_timeout)
        except asyncio.CancelledError:
            self.update_job_status(
                job_id, JobStatus.FAILED, error="Job cancelled before completion"
            )
            log.warning("Job cancelled")
            raise
        except Exception as e:
            self.update_job_status(
                job_id, JobStatus.FAILED, error=str(e) or type(e).__name__
            )
            log.error("Job failed", error=str(e), exc_info=True)
        else:
            self.update_job_status(job_id, JobStatus.COMPLETED, result=result)
            log.info("Job completed")
