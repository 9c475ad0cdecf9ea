"""
Periodic job models.

PeriodicTemplate: a named job template from the template registry
DerivedPeriodic: a template bound to one release for the current tick
JobRecord: an observed job execution from the job store
ReleaseJob: the job object submitted to the job sink
"""

import copy
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from release_periodics.core.constants import JobAgent, JobType
from release_periodics.models.release import ReleaseDefinition
from release_periodics.utils.time import now_utc, parse_duration


@dataclass
class EnvVar:
    """A single container environment variable."""

    name: str
    value: str = ""


@dataclass
class Container:
    """A container in a periodic job's pod."""

    name: str
    image: str
    args: List[str] = field(default_factory=list)
    env: List[EnvVar] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "image": self.image,
            "args": list(self.args),
            "env": [{"name": var.name, "value": var.value} for var in self.env],
        }


@dataclass
class PeriodicTemplate:
    """
    A periodic job template.

    Exactly one of cron or interval is set. An empty cron expression
    means the job is triggered on its interval instead.
    """

    name: str
    cron: str = ""
    interval: str = ""
    agent: JobAgent = JobAgent.KUBERNETES
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    containers: List[Container] = field(default_factory=list)

    @property
    def interval_delta(self) -> timedelta:
        """Interval as a timedelta (zero when unset)."""
        if not self.interval:
            return timedelta(0)
        return parse_duration(self.interval)

    def renamed(self, name: str) -> "PeriodicTemplate":
        """
        Get a deep copy of this template under a new name.

        Args:
            name: Name of the copy

        Returns:
            Independent PeriodicTemplate
        """
        return replace(copy.deepcopy(self), name=name)


@dataclass
class DerivedPeriodic:
    """A periodic template bound to a release, rebuilt every tick."""

    name: str
    template: PeriodicTemplate
    release: ReleaseDefinition
    upgrade: bool = False
    upgrade_from: str = ""

    @property
    def is_cron(self) -> bool:
        return bool(self.template.cron)


@dataclass(frozen=True)
class JobRecord:
    """An observed job execution, immutable for the duration of a tick."""

    job_id: str
    periodic_name: str
    completed: bool
    start_time: datetime


@dataclass
class ReleaseJob:
    """A fully built job ready to be submitted to the job sink."""

    job_name: str
    agent: JobAgent
    containers: List[Container] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    job_type: JobType = JobType.PERIODIC
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=now_utc)
    completion_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for storage and publishing.

        Returns:
            Dictionary representation of the job
        """
        return {
            "job_id": self.job_id,
            "job_name": self.job_name,
            "job_type": self.job_type.value,
            "agent": self.agent.value,
            "containers": [container.to_dict() for container in self.containers],
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
            "start_time": self.created_at.isoformat(),
            "completion_time": (
                self.completion_time.isoformat() if self.completion_time else None
            ),
        }
