"""
Fixed-cadence runner for the periodic reconciler.

Runs PeriodicReconciler.sync() immediately and then every poll interval
on an APScheduler BlockingScheduler. Ticks never overlap: the job is
registered with max_instances=1 and missed runs are coalesced.
Stops on SIGINT/SIGTERM.
"""

import logging
import signal
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from release_periodics.core.reconciler import PeriodicReconciler
from release_periodics.utils.time import now_utc

logger = logging.getLogger(__name__)

JOB_ID = "sync_release_periodics"


class PeriodicRunner:
    """Drives the reconciler on a fixed poll interval."""

    def __init__(self, reconciler: PeriodicReconciler, poll_interval_seconds: int = 120):
        """
        Initialize the runner.

        Args:
            reconciler: Reconciler executed on every tick
            poll_interval_seconds: Seconds between ticks
        """
        self.reconciler = reconciler
        self.poll_interval_seconds = poll_interval_seconds
        self.scheduler: Optional[BlockingScheduler] = None

    def build_scheduler(self) -> BlockingScheduler:
        """
        Build the APScheduler instance with the reconciliation job.

        Returns:
            BlockingScheduler: Configured scheduler ready to start
        """
        scheduler = BlockingScheduler(timezone="UTC")
        scheduler.add_job(
            func=self.tick,
            trigger=IntervalTrigger(seconds=self.poll_interval_seconds),
            id=JOB_ID,
            name="Sync Release Periodics",
            replace_existing=True,
            max_instances=1,  # Only one tick at a time
            coalesce=True,
            next_run_time=now_utc(),
        )
        logger.info(f"Periodic sync scheduled every {self.poll_interval_seconds}s")
        return scheduler

    def tick(self) -> None:
        """Run one reconciliation pass, logging anything that escapes it."""
        try:
            self.reconciler.sync()
        except Exception as e:
            logger.error(f"Unexpected error in periodic sync: {e}", exc_info=True)

    def start(self) -> None:
        """
        Start the runner and block until it is stopped.

        Runs until stopped via SIGINT/SIGTERM or stop().
        """
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.scheduler = self.build_scheduler()
        logger.info("Starting release periodic runner")
        try:
            self.scheduler.start()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Release periodic runner stopped")

    def stop(self) -> None:
        """Stop the runner without waiting for an in-progress tick."""
        if self.scheduler is not None and self.scheduler.running:
            logger.info("Stopping release periodic runner...")
            self.scheduler.shutdown(wait=False)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals (SIGINT, SIGTERM)."""
        logger.info(f"Received signal {signum}, initiating shutdown")
        self.stop()
