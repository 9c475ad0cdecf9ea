"""Controller constants."""

from enum import Enum


class ReleasePhase(str, Enum):
    """Lifecycle phases of a release tag."""

    PENDING = "Pending"
    READY = "Ready"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    FAILED = "Failed"


class JobAgent(str, Enum):
    """Execution agents a periodic template can target."""

    KUBERNETES = "kubernetes"
    JENKINS = "jenkins"


class JobType(str, Enum):
    """Kinds of jobs kept in the job store."""

    PERIODIC = "periodic"
    PRESUBMIT = "presubmit"
    POSTSUBMIT = "postsubmit"
    BATCH = "batch"


# Upgrade source that means "an older tag of the same release"
UPGRADE_FROM_PREVIOUS = "Previous"

# Labels and annotations stamped on every release periodic job
LABEL_VERIFY = "release.periodics/verify"
ANNOTATION_SOURCE = "release.periodics/source"
ANNOTATION_TO_TAG = "release.periodics/to-tag"
ANNOTATION_FROM_TAG = "release.periodics/from-tag"
LABEL_JOB_NAME = "release.periodics/job"
LABEL_JOB_TYPE = "release.periodics/type"

# Environment variables filled in from the resolved release artifacts
ENV_RELEASE_IMAGE_LATEST = "RELEASE_IMAGE_LATEST"
ENV_RELEASE_IMAGE_INITIAL = "RELEASE_IMAGE_INITIAL"
ENV_IMAGE_FORMAT = "IMAGE_FORMAT"
ENV_IMAGE_PREFIX = "IMAGE_"
