"""
Trigger decision engine.

Decides which derived periodics must get a new run this tick. At most one
run of a periodic is ever in flight: while the latest run is incomplete
neither the interval nor a cron firing produces a new one, and a cron
firing dropped this way is not queued for later.
"""

import logging
from datetime import datetime
from typing import AbstractSet, Iterable, List, Mapping, Optional

from release_periodics.models.periodic import DerivedPeriodic, JobRecord

logger = logging.getLogger(__name__)


def should_trigger(
    periodic: DerivedPeriodic,
    previous: Optional[JobRecord],
    due: AbstractSet[str],
    now: datetime,
) -> bool:
    """
    Decide whether a single periodic must run now.

    Args:
        periodic: Derived periodic definition
        previous: Latest known run of the periodic, if any
        due: Names reported due by the cron scheduler this tick
        now: Tick time

    Returns:
        True if a new run must be created
    """
    if not periodic.is_cron:
        if previous is None:
            return True
        if not previous.completed:
            return False
        return now - previous.start_time > periodic.template.interval_delta

    if periodic.name not in due:
        return False
    if previous is not None and not previous.completed:
        logger.debug(
            f"Ignoring cron firing of {periodic.name}: "
            f"run {previous.job_id} is still in progress"
        )
        return False
    return True


def decide_triggers(
    periodics: Iterable[DerivedPeriodic],
    history: Mapping[str, JobRecord],
    due: AbstractSet[str],
    now: datetime,
) -> List[DerivedPeriodic]:
    """
    Select the periodics to materialize this tick.

    Pure with respect to its inputs; the result keeps input order.

    Args:
        periodics: All derived periodics of the tick
        history: Latest job record per periodic name
        due: Names reported due by the cron scheduler
        now: Tick time

    Returns:
        Periodics that must get a new run
    """
    triggered = [
        periodic
        for periodic in periodics
        if should_trigger(periodic, history.get(periodic.name), due, now)
    ]
    logger.debug(f"{len(triggered)} periodic(s) triggered")
    return triggered
