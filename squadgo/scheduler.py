"""Interval job runner for the periodic matchmaking jobs."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flask import Flask

logger = logging.getLogger(__name__)


@dataclass
class Job:
    """A callable run every ``interval`` seconds."""

    name: str
    func: Callable[[], Any]
    interval: float
    app: Flask | None = field(default=None, repr=False)
    runs: int = 0
    thread: threading.Thread | None = field(default=None, repr=False)


class JobScheduler:
    """Runs each registered job in its own daemon thread.

    A job's errors are logged and the loop carries on with the next run.
    ``shutdown`` stops every loop at its next wake-up.
    """

    def __init__(self) -> None:
        """Start with no jobs."""
        self.jobs: dict[str, Job] = {}
        self._stop = threading.Event()
        self._app: Flask | None = None

    def init_app(self, app: Flask) -> None:
        """Run jobs registered from now on inside ``app``'s context."""
        self._app = app
        app.extensions["squadgo.scheduler"] = self

    def add_job(
        self,
        name: str,
        func: Callable[[], Any],
        interval: float,
        app: Flask | None = None,
    ) -> Job:
        """Register ``func`` to run every ``interval`` seconds.

        The job runs inside ``app``'s context, by default the app bound by
        the latest ``init_app`` at registration time.
        """
        if interval <= 0:
            raise ValueError(f"Job {name} needs a positive interval.")
        job = Job(name=name, func=func, interval=interval, app=app or self._app)
        self.jobs[name] = job
        return job

    @property
    def running(self) -> bool:
        """True while at least one job thread is alive."""
        return any(job.thread and job.thread.is_alive() for job in self.jobs.values())

    def run_job(self, job: Job) -> None:
        """Run ``job`` once, logging instead of raising."""
        try:
            if job.app is not None:
                with job.app.app_context():
                    job.func()
            else:
                job.func()
        except Exception as e:
            logger.error(f"Job {job.name} failed: {e}")
        finally:
            job.runs += 1

    def _loop(self, job: Job) -> None:
        while not self._stop.wait(job.interval):
            self.run_job(job)

    def start(self) -> None:
        """Start one background thread per job."""
        if self.running:
            return
        self._stop.clear()
        for job in self.jobs.values():
            job.thread = threading.Thread(
                target=self._loop, args=(job,), name=f"job-{job.name}", daemon=True
            )
            job.thread.start()
            logger.info(f"Started job {job.name} every {job.interval}s")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the job loops."""
        self._stop.set()
        if wait:
            for job in self.jobs.values():
                if job.thread is not None:
                    job.thread.join()
        logger.info("Job scheduler stopped")

    def wait(self) -> None:
        """Block until ``shutdown`` is called."""
        self._stop.wait()
