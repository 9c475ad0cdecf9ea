"""
Scheduler package for release periodic jobs.

This package provides:
- CronScheduler: tracks which cron-scheduled periodics are due
- PeriodicRunner: runs the reconciler on a fixed poll interval
"""

from release_periodics.scheduler.cron import CronScheduler, build_trigger

__all__ = ["CronScheduler", "build_trigger"]
