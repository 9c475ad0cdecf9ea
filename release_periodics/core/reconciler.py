"""Periodic job reconciler - one reconciliation pass per tick."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List

from release_periodics.core.constants import ReleasePhase
from release_periodics.core.catalog import build_release_periodics
from release_periodics.core.errors import CronSyncError, FetchFailed, MaterializeError
from release_periodics.core.history import latest_jobs
from release_periodics.core.materializer import ReleaseJobMaterializer
from release_periodics.core.naming import DEFAULT_SUFFIX
from release_periodics.core.trigger import decide_triggers
from release_periodics.scheduler.cron import CronScheduler
from release_periodics.sources.base import (
    ArtifactStore,
    JobHistorySource,
    JobSink,
    ReleaseSource,
    TemplateSource,
)
from release_periodics.utils.time import now_utc

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Outcome of one reconciliation pass."""

    started_at: datetime
    derived: List[str] = field(default_factory=list)
    triggered: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    errors: List[MaterializeError] = field(default_factory=list)
    skipped: bool = False
    skip_reason: str = ""


class PeriodicReconciler:
    """
    Main orchestrator of the release periodic pipeline.

    Pipeline per tick:
    1. Fetch releases and templates
    2. Derive the release periodics
    3. Sync the cron schedule and collect due names
    4. Build the job history index
    5. Decide triggers
    6. Materialize each triggered periodic
    7. Log aggregated failures

    The reconciler itself keeps no state between ticks; the cron
    scheduler and the job store carry everything that must survive.
    """

    def __init__(
        self,
        releases: ReleaseSource,
        templates: TemplateSource,
        history: JobHistorySource,
        sink: JobSink,
        artifacts: ArtifactStore,
        cron: CronScheduler,
        qualifying_phases: Iterable[str] = (ReleasePhase.ACCEPTED.value,),
        job_name_suffix: str = DEFAULT_SUFFIX,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.releases = releases
        self.templates = templates
        self.history = history
        self.sink = sink
        self.artifacts = artifacts
        self.cron = cron
        self.qualifying_phases = [ReleasePhase(p) for p in qualifying_phases]
        self.job_name_suffix = job_name_suffix
        self._clock = clock

    def sync(self) -> TickReport:
        """
        Run one reconciliation pass.

        Per-job failures are collected and logged; only a failure to read
        releases, templates or job history skips the tick.

        Returns:
            TickReport describing what happened
        """
        report = TickReport(started_at=self._clock())

        try:
            releases = self.releases.list_releases()
            templates = self.templates.load_templates()
        except FetchFailed as e:
            logger.error(f"Failed to load release definitions, skipping tick: {e}")
            report.skipped = True
            report.skip_reason = str(e)
            return report

        periodics = build_release_periodics(releases, templates, self.job_name_suffix)
        report.derived = list(periodics)

        try:
            self.cron.replace_schedule(
                (p.name, p.template.cron) for p in periodics.values() if p.is_cron
            )
        except CronSyncError as e:
            logger.error(f"Error syncing cron jobs: {e}")
        due = self.cron.due_names()

        try:
            records = self.history.list_job_records()
        except FetchFailed as e:
            logger.error(f"Failed to list periodic jobs, skipping tick: {e}")
            report.skipped = True
            report.skip_reason = str(e)
            return report

        history = latest_jobs(records)
        triggered = decide_triggers(periodics.values(), history, due, self._clock())
        report.triggered = [p.name for p in triggered]

        materializer = ReleaseJobMaterializer(
            sink=self.sink,
            artifacts=self.artifacts,
            releases={r.name: r for r in releases},
            qualifying_phases=self.qualifying_phases,
            clock=self._clock,
        )
        for periodic in triggered:
            try:
                materializer.materialize(periodic)
            except MaterializeError as e:
                report.errors.append(e)
                continue
            report.created.append(periodic.name)

        if report.errors:
            logger.error(
                f"Failed to create {len(report.errors)} periodic jobs: "
                f"{[str(e) for e in report.errors]}"
            )

        logger.info(
            f"Reconciled {len(report.derived)} release periodic(s): "
            f"{len(report.triggered)} triggered, {len(report.created)} created"
        )
        return report
