"""Derivation of release-scoped periodic job names."""

DEFAULT_SUFFIX = "periodic"


def derive_job_name(template_name: str, release_name: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """
    Build the globally unique name of a template bound to a release.

    The same base template may be referenced by several releases (for
    example a nightly and a CI stream), so the release name is part of the
    derived name. The result must stay stable across ticks because job
    history is looked up by it.

    Args:
        template_name: Base periodic template name
        release_name: Release name
        suffix: Fixed trailing component

    Returns:
        Derived job name, e.g. "e2e-upgrade-4.10-periodic"
    """
    return f"{template_name}-{release_name}-{suffix}"
