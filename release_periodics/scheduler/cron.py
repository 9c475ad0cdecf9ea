"""
Cron schedule for release periodic jobs.

CronScheduler keeps one APScheduler trigger per cron-bearing periodic and
reports which of them fired since it was last asked. It is a long-lived
component owned by the runner and used with a replace-then-query protocol
on every tick:

    scheduler.replace_schedule(entries)
    due = scheduler.due_names()

Supported expressions:
- Standard 5-field crontab expressions ("0 */6 * * *"); day of week 0 and 7
  are Sunday, and a day-of-month and day-of-week restricted together match
  on either
- Descriptors: @yearly, @annually, @monthly, @weekly, @daily, @midnight, @hourly
- "@every <duration>" (e.g. "@every 2h"), due as soon as it is first added
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Set, Tuple, Union

from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from release_periodics.core.errors import CronSyncError
from release_periodics.utils.time import now_utc, parse_duration

logger = logging.getLogger(__name__)

EVERY_PREFIX = "@every"

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * sun",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

# Leading characters that leave a day field unrestricted
_WILDCARDS = ("*", "?")

Trigger = Union[CronTrigger, IntervalTrigger, OrTrigger]


@dataclass
class _ScheduledEntry:
    expression: str
    trigger: Trigger
    next_fire_time: Optional[datetime]
    triggered: bool = False


def _weekday_number(token: str) -> int:
    """Day number of a crontab weekday token, 0 (and 7) being Sunday."""
    token = token.lower()
    if token.isdigit():
        number = int(token)
        if number > 7:
            raise ValueError(f"day of week {token!r} out of range 0-7")
        return number
    if token in _DAY_NAMES:
        return _DAY_NAMES.index(token)
    raise ValueError(f"invalid day of week {token!r}")


def _weekday_names(field: str) -> str:
    """
    Rewrite a crontab day-of-week field as a list of day names.

    APScheduler numbers the week from Monday, so numeric values and
    ranges are expanded here rather than passed through.

    Args:
        field: Day-of-week field ("1-5", "0-6/2", "sun,wed", "*")

    Returns:
        "*" or a comma-separated list of day names

    Raises:
        ValueError: If the field is malformed
    """
    if field in _WILDCARDS:
        return "*"

    days = set()
    for item in field.split(","):
        spec, slash, step_text = item.partition("/")
        step = 1
        if slash:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"invalid step in day of week {item!r}")
            step = int(step_text)

        if spec in _WILDCARDS:
            start, end = 0, 6
        elif "-" in spec:
            first, last = spec.split("-", 1)
            start, end = _weekday_number(first), _weekday_number(last)
            if start > end:
                raise ValueError(f"day of week range {item!r} ends before it starts")
        else:
            start = _weekday_number(spec)
            end = 6 if slash else start

        days.update(day % 7 for day in range(start, end + 1, step))

    return ",".join(_DAY_NAMES[day] for day in sorted(days))


def _crontab_trigger(crontab: str, timezone: str) -> Trigger:
    """
    Build a trigger for a 5-field crontab expression.

    When both day-of-month and day-of-week are restricted, the job fires
    on days matching either field, as cron does.
    """
    fields = crontab.split()
    if len(fields) != 5:
        raise ValueError(f"wrong number of fields; got {len(fields)}, expected 5")
    minute, hour, day, month, day_of_week = fields
    weekdays = _weekday_names(day_of_week)

    def cron(day: str = "*", day_of_week: str = "*") -> CronTrigger:
        return CronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=timezone,
        )

    if day.startswith(_WILDCARDS) or day_of_week.startswith(_WILDCARDS):
        return cron(day="*" if day == "?" else day, day_of_week=weekdays)
    return OrTrigger([cron(day=day), cron(day_of_week=weekdays)])


def build_trigger(expression: str, timezone: str = "UTC", now: Optional[datetime] = None) -> Trigger:
    """
    Build an APScheduler trigger for a cron expression.

    Args:
        expression: Crontab expression, descriptor or "@every <duration>"
        timezone: Time zone the expression is evaluated in
        now: Reference time for interval triggers (default: current time)

    Returns:
        CronTrigger, OrTrigger or IntervalTrigger

    Raises:
        ValueError: If the expression cannot be parsed
    """
    text = expression.strip()
    if not text:
        raise ValueError("empty cron expression")

    if text.startswith(EVERY_PREFIX):
        interval = parse_duration(text[len(EVERY_PREFIX):].strip())
        if interval.total_seconds() <= 0:
            raise ValueError(f"non-positive interval in {expression!r}")
        start = (now or now_utc()) + interval
        return IntervalTrigger(
            seconds=interval.total_seconds(), start_date=start, timezone=timezone
        )

    text = _DESCRIPTORS.get(text.lower(), text)
    return _crontab_trigger(text, timezone)


class CronScheduler:
    """
    Tracks which cron-scheduled periodics are due.

    Firings are recorded when due_names() observes that a trigger's next
    fire time has passed; several missed firings of the same entry are
    reported once.
    """

    def __init__(self, timezone: str = "UTC", clock: Callable[[], datetime] = now_utc):
        """
        Initialize an empty schedule.

        Args:
            timezone: Time zone cron expressions are evaluated in
            clock: Source of the current time (aware datetimes)
        """
        self.timezone = timezone
        self._clock = clock
        self._entries: Dict[str, _ScheduledEntry] = {}

    @property
    def names(self) -> Set[str]:
        return set(self._entries)

    def expression(self, name: str) -> Optional[str]:
        entry = self._entries.get(name)
        return entry.expression if entry else None

    def replace_schedule(self, entries: Iterable[Tuple[str, str]]) -> None:
        """
        Replace the schedule with the given (name, expression) pairs.

        Entries with an empty expression are interval-based and ignored.
        Unchanged entries keep their next fire time, so calling this every
        tick with the same input is a no-op.

        Args:
            entries: (name, cron expression) pairs

        Raises:
            CronSyncError: If some expressions were rejected; every valid
                entry has been applied when this is raised
        """
        wanted: Dict[str, str] = {}
        for name, expression in entries:
            expression = (expression or "").strip()
            if expression:
                wanted[name] = expression

        for name in list(self._entries):
            if name not in wanted:
                del self._entries[name]
                logger.info(f"Removed cron job {name}")

        now = self._clock()
        failures = []
        for name, expression in wanted.items():
            existing = self._entries.get(name)
            if existing is not None and existing.expression == expression:
                continue
            try:
                trigger = build_trigger(expression, timezone=self.timezone, now=now)
            except ValueError as e:
                self._entries.pop(name, None)
                failures.append(f"{name} ({expression!r}): {e}")
                continue

            self._entries[name] = _ScheduledEntry(
                expression=expression,
                trigger=trigger,
                next_fire_time=trigger.get_next_fire_time(None, now),
                triggered=expression.startswith(EVERY_PREFIX),
            )
            action = "Rescheduled" if existing is not None else "Added"
            logger.info(f"{action} cron job {name} with schedule {expression!r}")

        if failures:
            raise CronSyncError(failures)

    def due_names(self) -> Set[str]:
        """
        Get names that fired since the previous call.

        Reading is destructive: a firing is reported at most once.

        Returns:
            Names of due periodics
        """
        now = self._clock()
        due = set()
        for name, entry in self._entries.items():
            fire_time = entry.next_fire_time
            if fire_time is not None and fire_time <= now:
                entry.triggered = True
                while fire_time is not None and fire_time <= now:
                    fire_time = entry.trigger.get_next_fire_time(fire_time, now)
                entry.next_fire_time = fire_time
            if entry.triggered:
                due.add(name)
                entry.triggered = False
        if due:
            logger.info(f"Cron jobs due: {sorted(due)}")
        return due
