"""Tests for the fixed-cadence runner."""

import pytest
from unittest.mock import MagicMock

from apscheduler.triggers.interval import IntervalTrigger

from release_periodics.scheduler.runner import JOB_ID, PeriodicRunner


@pytest.fixture
def reconciler():
    return MagicMock()


class TestPeriodicRunner:
    """Tests for PeriodicRunner."""

    def test_build_scheduler_registers_sync_job(self, reconciler):
        """Test that ticks never overlap and start immediately."""
        runner = PeriodicRunner(reconciler, poll_interval_seconds=30)

        scheduler = runner.build_scheduler()
        job = scheduler.get_job(JOB_ID)

        assert job is not None
        assert job.max_instances == 1
        assert job.coalesce is True
        assert isinstance(job.trigger, IntervalTrigger)
        assert job.trigger.interval.total_seconds() == 30

    def test_tick_runs_sync(self, reconciler):
        PeriodicRunner(reconciler).tick()
        reconciler.sync.assert_called_once_with()

    def test_tick_survives_unexpected_errors(self, reconciler):
        """Test that an escaping exception does not stop the runner."""
        reconciler.sync.side_effect = RuntimeError("boom")
        runner = PeriodicRunner(reconciler)

        runner.tick()
        runner.tick()

        assert reconciler.sync.call_count == 2

    def test_stop_shuts_down_running_scheduler(self, reconciler):
        runner = PeriodicRunner(reconciler)
        runner.scheduler = MagicMock(running=True)

        runner.stop()

        runner.scheduler.shutdown.assert_called_once_with(wait=False)

    def test_stop_without_scheduler(self, reconciler):
        PeriodicRunner(reconciler).stop()
