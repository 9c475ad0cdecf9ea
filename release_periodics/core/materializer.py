"""
Release job materializer.

Turns a triggered DerivedPeriodic into a submitted ReleaseJob:
1. Select the release's newest qualifying tag
2. Resolve the tag's mirror repository
3. For upgrade jobs, resolve the tag and pull spec to upgrade from
4. Fill the template in with release information
5. Submit the job once
"""

import copy
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from release_periodics.core.constants import (
    ANNOTATION_FROM_TAG,
    ANNOTATION_SOURCE,
    ANNOTATION_TO_TAG,
    ENV_IMAGE_FORMAT,
    ENV_IMAGE_PREFIX,
    ENV_RELEASE_IMAGE_INITIAL,
    ENV_RELEASE_IMAGE_LATEST,
    LABEL_JOB_NAME,
    LABEL_JOB_TYPE,
    LABEL_VERIFY,
    UPGRADE_FROM_PREVIOUS,
    JobAgent,
    JobType,
    ReleasePhase,
)
from release_periodics.core.errors import (
    ArtifactResolutionFailed,
    NoQualifyingArtifact,
    SpecAugmentationFailed,
    SubmissionFailed,
    UpgradeSourceResolutionFailed,
)
from release_periodics.models.periodic import Container, DerivedPeriodic, ReleaseJob
from release_periodics.models.release import ArtifactTag, ReleaseDefinition
from release_periodics.sources.base import ArtifactStore, JobSink
from release_periodics.utils.time import now_utc

logger = logging.getLogger(__name__)


def add_release_env(
    containers: List[Container],
    release: ReleaseDefinition,
    mirror: str,
    tag: ArtifactTag,
    previous_pull_spec: str = "",
) -> None:
    """
    Fill in release environment variables declared by the containers.

    Only variables the template already declares are set:
    - RELEASE_IMAGE_LATEST: pull spec of the current tag
    - RELEASE_IMAGE_INITIAL: pull spec to upgrade from
    - IMAGE_FORMAT: mirror pull spec pattern with a ${component} placeholder
    - IMAGE_<NAME>: mirror pull spec of component <name>

    Args:
        containers: Containers to update in place
        release: Release the job runs against
        mirror: Mirror repository of the current tag
        tag: Current tag
        previous_pull_spec: Pull spec to upgrade from, if any

    Raises:
        ValueError: If a declared variable cannot be filled in
    """
    for container in containers:
        for var in container.env:
            name = var.name
            if name == ENV_RELEASE_IMAGE_LATEST:
                var.value = release.pull_spec(tag.name)
            elif name == ENV_RELEASE_IMAGE_INITIAL:
                if not previous_pull_spec:
                    raise ValueError(
                        f"container {container.name} requires {ENV_RELEASE_IMAGE_INITIAL} "
                        "but the job is not an upgrade job"
                    )
                var.value = previous_pull_spec
            elif name == ENV_IMAGE_FORMAT:
                var.value = f"{mirror}:${{component}}"
            elif name.startswith(ENV_IMAGE_PREFIX):
                component = name[len(ENV_IMAGE_PREFIX):]
                if not component:
                    continue
                var.value = f"{mirror}:{component.lower().replace('_', '-')}"


class ReleaseJobMaterializer:
    """
    Builds and submits jobs for triggered release periodics.

    Holds the tick's release index so upgrade jobs can resolve the release
    they upgrade from.
    """

    def __init__(
        self,
        sink: JobSink,
        artifacts: ArtifactStore,
        releases: Mapping[str, ReleaseDefinition],
        qualifying_phases: Iterable[ReleasePhase] = (ReleasePhase.ACCEPTED,),
        clock: Callable[[], datetime] = now_utc,
    ):
        self.sink = sink
        self.artifacts = artifacts
        self.releases = releases
        self.qualifying_phases = frozenset(ReleasePhase(p) for p in qualifying_phases)
        self._clock = clock

    def materialize(self, periodic: DerivedPeriodic) -> ReleaseJob:
        """
        Build and submit a job for a triggered periodic.

        Args:
            periodic: Periodic selected by the trigger decision engine

        Returns:
            The submitted ReleaseJob

        Raises:
            MaterializeError: Subclass describing the failing step
        """
        release = periodic.release

        tag = release.latest_tag(self.qualifying_phases)
        if tag is None:
            raise NoQualifyingArtifact(
                periodic.name, f"no accepted tags found for release {release.name}"
            )

        try:
            mirror = self.artifacts.get_mirror(release, tag.name)
        except Exception as e:
            raise ArtifactResolutionFailed(
                periodic.name,
                f"failed to get mirror for release {release.name} tag {tag.name}: {e}",
                cause=e,
            ) from e

        previous_tag: Optional[str] = None
        previous_pull_spec = ""
        if periodic.upgrade:
            previous_tag, previous_pull_spec = self._resolve_upgrade_source(periodic, tag)

        job = self._build_job(periodic, mirror, tag, previous_tag, previous_pull_spec)

        try:
            self.sink.submit(job)
        except Exception as e:
            raise SubmissionFailed(
                periodic.name, f"failed to create periodic job: {e}", cause=e
            ) from e

        logger.info(
            f"Created periodic job {job.job_id} for {periodic.name}",
            extra={"job_name": periodic.name, "to_tag": tag.name, "from_tag": previous_tag},
        )
        return job

    def _resolve_upgrade_source(
        self, periodic: DerivedPeriodic, current: ArtifactTag
    ) -> Tuple[str, str]:
        """
        Find the tag and pull spec an upgrade job starts from.

        An empty upgrade_from or "Previous" means the same release. Within
        the same release only tags strictly older than the current one are
        eligible; for another release its newest qualifying tag is used.

        Returns:
            (previous tag name, previous pull spec)

        Raises:
            UpgradeSourceResolutionFailed: If no source tag can be found
        """
        source_name = periodic.upgrade_from or UPGRADE_FROM_PREVIOUS
        if source_name == UPGRADE_FROM_PREVIOUS:
            source_name = periodic.release.name

        source = self.releases.get(source_name)
        if source is None:
            raise UpgradeSourceResolutionFailed(
                periodic.name,
                f"release {periodic.release.name} upgrades from unknown release {source_name}",
            )

        candidates = source.tags_in_phase(self.qualifying_phases)
        if source.name == periodic.release.name:
            names = [t.name for t in candidates]
            if current.name in names:
                candidates = candidates[names.index(current.name) + 1:]
            else:
                candidates = []

        if not candidates:
            raise UpgradeSourceResolutionFailed(
                periodic.name,
                f"no previous tag to upgrade to {current.name} found in release {source.name}",
            )

        previous = candidates[0]
        return previous.name, source.pull_spec(previous.name)

    def _build_job(
        self,
        periodic: DerivedPeriodic,
        mirror: str,
        tag: ArtifactTag,
        previous_tag: Optional[str],
        previous_pull_spec: str,
    ) -> ReleaseJob:
        template = periodic.template
        release = periodic.release
        containers = copy.deepcopy(template.containers)

        # Jenkins jobs cannot be parameterized
        if template.agent != JobAgent.JENKINS:
            try:
                add_release_env(containers, release, mirror, tag, previous_pull_spec)
            except ValueError as e:
                raise SpecAugmentationFailed(
                    periodic.name, f"failed to add release env to periodic: {e}", cause=e
                ) from e

        labels = dict(template.labels)
        labels[LABEL_JOB_NAME] = periodic.name
        labels[LABEL_JOB_TYPE] = JobType.PERIODIC.value
        labels[LABEL_VERIFY] = "true"

        annotations = dict(template.annotations)
        annotations[ANNOTATION_SOURCE] = str(release.source)
        annotations[ANNOTATION_TO_TAG] = tag.name
        if periodic.upgrade and previous_tag:
            annotations[ANNOTATION_FROM_TAG] = previous_tag

        return ReleaseJob(
            job_name=periodic.name,
            agent=template.agent,
            containers=containers,
            labels=labels,
            annotations=annotations,
            created_at=self._clock(),
        )
