"""
Data models for the Release Periodics controller.
"""

from release_periodics.models.periodic import (
    Container,
    DerivedPeriodic,
    EnvVar,
    JobRecord,
    PeriodicTemplate,
    ReleaseJob,
)
from release_periodics.models.release import (
    ArtifactTag,
    PeriodicTemplateRef,
    ReleaseDefinition,
    ReleaseSourceRef,
)

__all__ = [
    "ArtifactTag",
    "Container",
    "DerivedPeriodic",
    "EnvVar",
    "JobRecord",
    "PeriodicTemplate",
    "PeriodicTemplateRef",
    "ReleaseDefinition",
    "ReleaseJob",
    "ReleaseSourceRef",
]
