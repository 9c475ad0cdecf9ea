"""
Entry point of the Release Periodics controller.

Usage:
    python -m release_periodics
"""

from release_periodics.config import get_settings
from release_periodics.core.logging_config import get_logger, setup_logging
from release_periodics.core.reconciler import PeriodicReconciler
from release_periodics.scheduler.cron import CronScheduler
from release_periodics.scheduler.runner import PeriodicRunner
from release_periodics.sources.files import (
    FileReleaseSource,
    FileTemplateSource,
    ReleaseMirrorStore,
)
from release_periodics.sources.redis_store import RedisJobStore

logger = get_logger(__name__)


def build_reconciler(settings=None, job_store=None) -> PeriodicReconciler:
    """
    Wire the reconciler from settings.

    Args:
        settings: Settings to use (default: get_settings())
        job_store: Job history source and sink (default: RedisJobStore)

    Returns:
        PeriodicReconciler ready to sync
    """
    settings = settings or get_settings()
    job_store = job_store or RedisJobStore()
    return PeriodicReconciler(
        releases=FileReleaseSource(settings.releases_path),
        templates=FileTemplateSource(settings.templates_path),
        history=job_store,
        sink=job_store,
        artifacts=ReleaseMirrorStore(),
        cron=CronScheduler(timezone=settings.cron_timezone),
        qualifying_phases=settings.qualifying_phases,
        job_name_suffix=settings.job_name_suffix,
    )


def main():
    """Start the periodic runner."""
    setup_logging()
    settings = get_settings()

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Releases: {settings.releases_path}, periodics: {settings.templates_path}")

    job_store = RedisJobStore()
    runner = PeriodicRunner(
        build_reconciler(settings, job_store),
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    try:
        runner.start()
    finally:
        job_store.close()
        logger.info(f"Shutting down {settings.app_name}")


if __name__ == "__main__":
    main()
