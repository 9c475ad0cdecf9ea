"""
Release definition models.

A release is a named pipeline that produces versioned artifact tags and
carries a list of periodic job templates to run against its newest
qualifying tag.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from release_periodics.core.constants import ReleasePhase


@dataclass(frozen=True)
class ArtifactTag:
    """A versioned output of a release and its qualification phase."""

    name: str
    phase: ReleasePhase

    def __post_init__(self):
        # Accept raw phase strings from decoded documents
        if isinstance(self.phase, str) and not isinstance(self.phase, ReleasePhase):
            object.__setattr__(self, "phase", ReleasePhase(self.phase))


@dataclass(frozen=True)
class PeriodicTemplateRef:
    """Reference from a release to a periodic template by base name."""

    base_job_name: str
    upgrade: bool = False
    upgrade_from: str = ""


@dataclass(frozen=True)
class ReleaseSourceRef:
    """Where a release's artifact tags are published."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class ReleaseDefinition:
    """
    A release pipeline with its periodic jobs and artifact tags.

    Tags are kept newest first, matching the order the release source
    reports them in.
    """

    name: str
    source: ReleaseSourceRef
    target_repository: str
    periodics: List[PeriodicTemplateRef] = field(default_factory=list)
    tags: List[ArtifactTag] = field(default_factory=list)
    mirrors: Dict[str, str] = field(default_factory=dict)

    def tags_in_phase(self, phases: Iterable[ReleasePhase]) -> List[ArtifactTag]:
        """
        Get tags whose phase is one of the given phases, newest first.

        Args:
            phases: Qualifying phases

        Returns:
            Matching tags in release order
        """
        wanted = set(phases)
        return [tag for tag in self.tags if tag.phase in wanted]

    def latest_tag(self, phases: Iterable[ReleasePhase]) -> Optional[ArtifactTag]:
        """Get the newest tag in one of the given phases, if any."""
        tags = self.tags_in_phase(phases)
        return tags[0] if tags else None

    def pull_spec(self, tag_name: str) -> str:
        """Get the pull spec of a tag in the release's target repository."""
        return f"{self.target_repository}:{tag_name}"
