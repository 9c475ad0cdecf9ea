"""
Error types raised while reconciling release periodic jobs.

FetchFailed aborts a whole tick. InvalidDefinition skips one
release/template pair. MaterializeError subclasses are scoped to one
derived periodic and are collected into the tick report.
"""

from typing import List, Optional


class PeriodicsError(Exception):
    """Base class for all controller errors."""


class FetchFailed(PeriodicsError):
    """Releases, templates or job history could not be read."""


class InvalidDefinition(PeriodicsError):
    """A template or a release's job reference is malformed."""


class CronSyncError(PeriodicsError):
    """One or more cron entries could not be scheduled."""

    def __init__(self, failures: List[str]):
        self.failures = failures
        super().__init__(f"{len(failures)} cron entries rejected: {'; '.join(failures)}")


class MaterializeError(PeriodicsError):
    """A triggered periodic could not be turned into a submitted job."""

    def __init__(self, periodic_name: str, message: str, cause: Optional[BaseException] = None):
        self.periodic_name = periodic_name
        self.cause = cause
        super().__init__(f"{periodic_name}: {message}")


class NoQualifyingArtifact(MaterializeError):
    """The release has no tag in a qualifying phase."""


class ArtifactResolutionFailed(MaterializeError):
    """The mirror for the selected tag could not be looked up."""


class UpgradeSourceResolutionFailed(MaterializeError):
    """No previous tag could be found to upgrade from."""


class SpecAugmentationFailed(MaterializeError):
    """The template could not be filled in with release information."""


class SubmissionFailed(MaterializeError):
    """The job sink rejected the job; it may or may not have been created."""
