"""
Release catalog adapter.

Expands release definitions and their periodic template references into
the tick's set of derived periodics.
"""

import logging
from typing import Dict, Iterable, Mapping

from release_periodics.core.constants import JobAgent
from release_periodics.core.errors import InvalidDefinition
from release_periodics.core.naming import DEFAULT_SUFFIX, derive_job_name
from release_periodics.models.periodic import DerivedPeriodic, PeriodicTemplate
from release_periodics.models.release import ReleaseDefinition
from release_periodics.scheduler.cron import build_trigger

logger = logging.getLogger(__name__)


def validate_template(template: PeriodicTemplate) -> None:
    """
    Check that a template can be scheduled and parameterized.

    Args:
        template: Template to validate

    Raises:
        InvalidDefinition: If the template is malformed
    """
    if bool(template.cron) == bool(template.interval):
        raise InvalidDefinition(
            f"periodic {template.name} must set exactly one of cron or interval"
        )

    if template.interval:
        try:
            interval = template.interval_delta
        except ValueError as e:
            raise InvalidDefinition(f"periodic {template.name} has invalid interval: {e}") from e
        if interval.total_seconds() <= 0:
            raise InvalidDefinition(f"periodic {template.name} has non-positive interval")
    else:
        try:
            build_trigger(template.cron)
        except ValueError as e:
            raise InvalidDefinition(
                f"periodic {template.name} has invalid cron {template.cron!r}: {e}"
            ) from e

    if template.agent == JobAgent.KUBERNETES and not template.containers:
        raise InvalidDefinition(f"periodic {template.name} defines no containers")


def build_release_periodics(
    releases: Iterable[ReleaseDefinition],
    templates: Mapping[str, PeriodicTemplate],
    suffix: str = DEFAULT_SUFFIX,
) -> Dict[str, DerivedPeriodic]:
    """
    Bind every release's periodic references to their templates.

    References to unknown or invalid templates are logged and skipped.
    Each derived periodic gets its own copy of the template, renamed to
    the derived job name.

    Args:
        releases: Release definitions of this tick
        templates: Template registry snapshot keyed by name
        suffix: Job name suffix

    Returns:
        Ordered dictionary of derived name to DerivedPeriodic
    """
    derived: Dict[str, DerivedPeriodic] = {}
    for release in releases:
        for ref in release.periodics:
            template = templates.get(ref.base_job_name)
            if template is None:
                logger.error(
                    f"The periodic {ref.base_job_name} referenced by release "
                    f"{release.name} is not valid: no job with that name"
                )
                continue
            try:
                validate_template(template)
            except InvalidDefinition as e:
                logger.error(
                    f"The periodic {ref.base_job_name} referenced by release "
                    f"{release.name} is not valid: {e}"
                )
                continue

            name = derive_job_name(ref.base_job_name, release.name, suffix)
            if name in derived:
                logger.error(
                    f"Derived periodic name {name} of release {release.name} "
                    f"collides with release {derived[name].release.name}; skipping"
                )
                continue

            derived[name] = DerivedPeriodic(
                name=name,
                template=template.renamed(name),
                release=release,
                upgrade=ref.upgrade,
                upgrade_from=ref.upgrade_from,
            )

    logger.debug(f"Derived {len(derived)} release periodic(s)")
    return derived
