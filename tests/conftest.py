"""
Pytest Configuration and Fixtures.

Provides shared factories and fixtures for testing the release periodics
controller.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from release_periodics.core.constants import JobAgent, ReleasePhase
from release_periodics.core.naming import derive_job_name
from release_periodics.models.periodic import (
    Container,
    DerivedPeriodic,
    EnvVar,
    JobRecord,
    PeriodicTemplate,
)
from release_periodics.models.release import (
    ArtifactTag,
    PeriodicTemplateRef,
    ReleaseDefinition,
    ReleaseSourceRef,
)


NOW = datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc)


class FakeClock:
    """Mutable clock shared between components under test."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ============================================================================
# Factories
# ============================================================================

def make_template(
    name: str = "e2e",
    cron: str = "",
    interval: str = "24h",
    env: Optional[List[str]] = None,
    agent: JobAgent = JobAgent.KUBERNETES,
    labels: Optional[Dict[str, str]] = None,
    annotations: Optional[Dict[str, str]] = None,
) -> PeriodicTemplate:
    """Create a periodic template with one container."""
    if cron:
        interval = ""
    env_names = env if env is not None else ["RELEASE_IMAGE_LATEST"]
    return PeriodicTemplate(
        name=name,
        cron=cron,
        interval=interval,
        agent=agent,
        labels=labels or {"team": "release"},
        annotations=annotations or {},
        containers=[
            Container(
                name="test",
                image="registry.example.com/ci/tests:latest",
                args=["run-tests"],
                env=[EnvVar(name=n) for n in env_names],
            )
        ],
    )


def make_release(
    name: str = "4.10",
    periodics: Optional[List[PeriodicTemplateRef]] = None,
    tags: Optional[List[ArtifactTag]] = None,
    mirrors: Optional[Dict[str, str]] = None,
) -> ReleaseDefinition:
    """Create a release with one accepted tag and a mirror for every tag."""
    if tags is None:
        tags = [ArtifactTag(name=f"{name}.0-0.nightly-2", phase=ReleasePhase.ACCEPTED)]
    if mirrors is None:
        mirrors = {tag.name: f"registry.example.com/ocp/{name}-art" for tag in tags}
    return ReleaseDefinition(
        name=name,
        source=ReleaseSourceRef(namespace="ocp", name=f"release-{name}"),
        target_repository="registry.example.com/ocp/release",
        periodics=periodics or [],
        tags=tags,
        mirrors=mirrors,
    )


def make_periodic(
    template: Optional[PeriodicTemplate] = None,
    release: Optional[ReleaseDefinition] = None,
    upgrade: bool = False,
    upgrade_from: str = "",
) -> DerivedPeriodic:
    """Bind a template to a release the way the catalog does."""
    template = template or make_template()
    release = release or make_release()
    name = derive_job_name(template.name, release.name)
    return DerivedPeriodic(
        name=name,
        template=template.renamed(name),
        release=release,
        upgrade=upgrade,
        upgrade_from=upgrade_from,
    )


def make_record(
    periodic_name: str,
    completed: bool = True,
    started_ago: timedelta = timedelta(hours=1),
    now: datetime = NOW,
    job_id: str = "job-1",
) -> JobRecord:
    """Create a job record that started some time before now."""
    return JobRecord(
        job_id=job_id,
        periodic_name=periodic_name,
        completed=completed,
        start_time=now - started_ago,
    )


def make_job_document(
    job_id: str,
    job_name: str,
    start_time: datetime,
    completion_time: Optional[datetime] = None,
    job_type: str = "periodic",
) -> dict:
    """Create a job store document."""
    return {
        "job_id": job_id,
        "job_name": job_name,
        "job_type": job_type,
        "start_time": start_time.isoformat(),
        "completion_time": completion_time.isoformat() if completion_time else None,
    }


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at NOW until advanced."""
    return FakeClock()


@pytest.fixture
def release() -> ReleaseDefinition:
    """A release with a single accepted tag."""
    return make_release()
