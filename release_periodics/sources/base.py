"""
Contracts of the controller's external collaborators.

Every collaborator is read once per tick; implementations raise
FetchFailed when the underlying store cannot be read.
"""

from typing import Dict, List, Protocol

from release_periodics.models.periodic import JobRecord, PeriodicTemplate, ReleaseJob
from release_periodics.models.release import ReleaseDefinition


class ReleaseSource(Protocol):
    """Lists release definitions with their tags, newest tag first."""

    def list_releases(self) -> List[ReleaseDefinition]:
        ...


class TemplateSource(Protocol):
    """Provides the periodic template registry keyed by template name."""

    def load_templates(self) -> Dict[str, PeriodicTemplate]:
        ...


class ArtifactStore(Protocol):
    """Resolves the mirror repository holding a release tag's images."""

    def get_mirror(self, release: ReleaseDefinition, tag_name: str) -> str:
        ...


class JobHistorySource(Protocol):
    """Lists all known periodic job records."""

    def list_job_records(self) -> List[JobRecord]:
        ...


class JobSink(Protocol):
    """Accepts fully built jobs for execution."""

    def submit(self, job: ReleaseJob) -> None:
        ...
