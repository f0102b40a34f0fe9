"""
Background job scheduler for long-running jobs (e.g. auto translate).

A job is a named callable run on a daemon thread. Before the thread starts
the scheduler takes the job's lease row in sqlite, so only one worker per
job name runs at a time, across processes sharing the database. The worker
renews the lease through the heartbeat it is handed; the lease is released
when the job body returns or raises.
"""

from __future__ import annotations

import os
import socket
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from langdesk.core import database as db
from langdesk.core.cancellation import CancelToken
from langdesk.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LEASE_TTL_SECONDS = 600

JobTarget = Callable[[CancelToken, Callable[[], bool]], Any]


@dataclass
class JobState:
    """In-memory representation of a scheduled job run."""

    job_name: str
    owner: str
    cancel_requested: bool = False
    lease_lost: bool = False
    state: str = "pending"  # pending|running|completed|failed|cancelled
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    last_update: float = field(default_factory=time.time)
    token: CancelToken = field(default_factory=CancelToken, repr=False)
    thread: Optional[threading.Thread] = field(default=None, repr=False)

    def request_cancel(self):
        """Mark this job as requested for cancellation and wake its worker."""
        self.cancel_requested = True
        self.last_update = time.time()
        self.token.cancel()

    @property
    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_name": self.job_name,
            "owner": self.owner,
            "cancel_requested": self.cancel_requested,
            "lease_lost": self.lease_lost,
            "state": self.state,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "error": self.error,
            "last_update": self.last_update,
        }


def _new_owner() -> str:
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:12]}"


class JobScheduler:
    """
    Runs registered jobs on daemon threads, one run per job name at a time.

    Args:
        lease_ttl_seconds: Lease lifetime, or a callable returning it; a
            callable is asked again on every acquire and renewal
    """

    def __init__(self, lease_ttl_seconds: Union[float, Callable[[], float]] = DEFAULT_LEASE_TTL_SECONDS):
        self.lease_ttl_seconds = lease_ttl_seconds
        self._targets: Dict[str, JobTarget] = {}
        self._jobs: Dict[str, JobState] = {}
        self._lock = threading.Lock()

    def _lease_ttl(self) -> float:
        ttl = self.lease_ttl_seconds
        return float(ttl() if callable(ttl) else ttl)

    def register(self, job_name: str, target: JobTarget):
        """
        Register the body of a job.

        Args:
            job_name: Job identifier, also the lease key
            target: Called as target(token, heartbeat) on the worker thread;
                heartbeat() renews the lease and returns False if it was lost
        """
        self._targets[job_name] = target

    def schedule(self, job_name: str) -> bool:
        """
        Launch a job in the background.

        Returns:
            True if the job was started, False if a run already holds its lease
        """
        if job_name not in self._targets:
            raise KeyError(f"Unknown job: {job_name}")

        with self._lock:
            current = self._jobs.get(job_name)
            if current is not None and current.is_alive:
                return False

            owner = _new_owner()
            if not db.acquire_lease(job_name, owner, self._lease_ttl()):
                logger.info("Job %s is already held by another worker", job_name)
                return False

            job = JobState(job_name=job_name, owner=owner)
            job.thread = threading.Thread(
                target=self._run_job,
                args=(job,),
                name=f"{job_name}-job-{owner[-12:]}",
                daemon=True,
            )
            self._jobs[job_name] = job
            job.thread.start()

        logger.info("Job %s started (owner=%s)", job_name, owner)
        return True

    def cancel(self, job_name: str) -> bool:
        """
        Request cancellation of a running job.

        Returns:
            True if a running job was found and asked to stop
        """
        with self._lock:
            job = self._jobs.get(job_name)
            if not job or job.state in ("completed", "failed", "cancelled"):
                return False
            job.request_cancel()
        logger.info("Cancellation requested for job %s", job_name)
        return True

    def is_active(self, job_name: str) -> bool:
        """True while a local thread runs the job or any worker holds its lease."""
        with self._lock:
            job = self._jobs.get(job_name)
            if job is not None and job.is_alive:
                return True
        return db.get_lease(job_name) is not None

    def get_job(self, job_name: str) -> Optional[JobState]:
        """Latest run of a job started by this scheduler."""
        with self._lock:
            return self._jobs.get(job_name)

    def wait(self, job_name: str, timeout: Optional[float] = None) -> bool:
        """
        Block until the local run of a job ends.

        Returns:
            True if no local run is alive anymore
        """
        job = self.get_job(job_name)
        if job is None or job.thread is None:
            return True
        job.thread.join(timeout)
        return not job.thread.is_alive()

    def _run_job(self, job: JobState):
        """Worker function executed in a background thread."""
        job.state = "running"
        job.started_at = time.time()
        job.last_update = job.started_at

        def heartbeat() -> bool:
            job.last_update = time.time()
            renewed = db.renew_lease(job.job_name, job.owner, self._lease_ttl())
            if not renewed:
                job.lease_lost = True
                logger.warning("Job %s lost its lease (owner=%s)", job.job_name, job.owner)
            return renewed

        try:
            result = self._targets[job.job_name](job.token, heartbeat)
            job.result = result if isinstance(result, dict) else None
            job.state = "cancelled" if job.cancel_requested or job.lease_lost else "completed"
            logger.info("Job %s %s", job.job_name, job.state)
        except Exception as exc:
            job.state = "failed"
            error_type = type(exc).__name__
            job.error = f"{error_type}: {exc}"
            logger.exception("✗ Job %s failed: %s: %s", job.job_name, error_type, exc)
        finally:
            job.finished_at = time.time()
            job.last_update = job.finished_at
            db.release_lease(job.job_name, job.owner)
