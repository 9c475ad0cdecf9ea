"""Core module initialization."""

from release_periodics.core.constants import JobAgent, JobType, ReleasePhase
from release_periodics.core.errors import (
    ArtifactResolutionFailed,
    CronSyncError,
    FetchFailed,
    InvalidDefinition,
    MaterializeError,
    NoQualifyingArtifact,
    PeriodicsError,
    SpecAugmentationFailed,
    SubmissionFailed,
    UpgradeSourceResolutionFailed,
)
from release_periodics.core.logging_config import get_logger, setup_logging

__all__ = [
    "JobAgent",
    "JobType",
    "ReleasePhase",
    "PeriodicsError",
    "FetchFailed",
    "InvalidDefinition",
    "CronSyncError",
    "MaterializeError",
    "NoQualifyingArtifact",
    "ArtifactResolutionFailed",
    "UpgradeSourceResolutionFailed",
    "SpecAugmentationFailed",
    "SubmissionFailed",
    "setup_logging",
    "get_logger",
]
