"""
Tests for the cron schedule adapter.

All tests drive the scheduler with a fake clock starting at 10:30 UTC.
"""

import pytest
from datetime import datetime, timezone

from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger

from release_periodics.core.errors import CronSyncError
from release_periodics.scheduler.cron import CronScheduler, _weekday_names, build_trigger
from tests.conftest import FakeClock


@pytest.fixture
def scheduler(clock) -> CronScheduler:
    return CronScheduler(clock=clock)


class TestBuildTrigger:
    """Tests for build_trigger()."""

    @pytest.mark.parametrize(
        "expression",
        [
            "0 * * * *",
            "*/15 2-4 * * 1-5",
            "0 6 * * 0-4",
            "0 6 * * 0-6",
            "0 6 * * 0-6/2",
            "0 6 * * 7",
            "0 6 * * 5-7",
            "0 0 1 * 1",
            "0 0 ? * mon",
            "@hourly",
            "@daily",
            "@weekly",
            "@every 90m",
        ],
    )
    def test_accepts_supported_expressions(self, expression):
        assert build_trigger(expression) is not None

    @pytest.mark.parametrize(
        "expression",
        [
            "",
            "not a cron",
            "0 * * *",
            "61 * * * *",
            "0 6 * * 5-0",
            "0 6 * * 8",
            "0 6 * * 1/0",
            "0 6 * * funday",
            "@every",
            "@every 0s",
            "@every soon",
        ],
    )
    def test_rejects_invalid_expressions(self, expression):
        with pytest.raises(ValueError):
            build_trigger(expression)

    def test_day_fields_combine_with_or_when_both_restricted(self):
        assert isinstance(build_trigger("0 0 1 * 1"), OrTrigger)
        assert isinstance(build_trigger("0 0 1 * *"), CronTrigger)
        assert isinstance(build_trigger("0 0 */2 * 1"), CronTrigger)


class TestWeekdayNames:
    """Tests for the crontab day-of-week translation."""

    @pytest.mark.parametrize(
        "field,expected",
        [
            ("*", "*"),
            ("0", "sun"),
            ("7", "sun"),
            ("0-4", "sun,mon,tue,wed,thu"),
            ("0-6/2", "sun,tue,thu,sat"),
            ("5-7", "sun,fri,sat"),
            ("1,3", "mon,wed"),
            ("*/3", "sun,wed,sat"),
            ("2/2", "tue,thu,sat"),
            ("MON-fri", "mon,tue,wed,thu,fri"),
        ],
    )
    def test_translation(self, field, expected):
        assert _weekday_names(field) == expected

    @pytest.mark.parametrize("field", ["5-0", "sat-sun", "8", "1/0", "1-", "1,,2", "funday"])
    def test_invalid_fields(self, field):
        with pytest.raises(ValueError):
            _weekday_names(field)


class TestDueNames:
    """Tests for replace_schedule() followed by due_names()."""

    def test_nothing_due_before_first_firing(self, scheduler, clock):
        scheduler.replace_schedule([("hourly", "0 * * * *")])
        assert scheduler.due_names() == set()

        clock.advance(minutes=29)
        assert scheduler.due_names() == set()

    def test_firing_reported_once(self, scheduler, clock):
        """Test that reading due names is destructive."""
        scheduler.replace_schedule([("hourly", "0 * * * *")])

        clock.advance(minutes=31)
        assert scheduler.due_names() == {"hourly"}
        assert scheduler.due_names() == set()

    def test_missed_firings_coalesce(self, scheduler, clock):
        """Test that several missed firings are reported as one."""
        scheduler.replace_schedule([("hourly", "0 * * * *")])

        clock.advance(hours=5)
        assert scheduler.due_names() == {"hourly"}
        assert scheduler.due_names() == set()

        clock.advance(hours=1)
        assert scheduler.due_names() == {"hourly"}

    def test_descriptor(self, scheduler, clock):
        scheduler.replace_schedule([("nightly", "@daily")])

        clock.advance(hours=13)
        assert scheduler.due_names() == set()

        clock.advance(hours=1)
        assert scheduler.due_names() == {"nightly"}

    def test_every_is_due_immediately(self, scheduler, clock):
        """Test that an @every entry fires when added and then per interval."""
        scheduler.replace_schedule([("poll", "@every 2h")])
        assert scheduler.due_names() == {"poll"}

        clock.advance(hours=1)
        assert scheduler.due_names() == set()

        clock.advance(hours=1, seconds=1)
        assert scheduler.due_names() == {"poll"}

    def test_range_starting_on_sunday(self, scheduler, clock):
        """Test that 0-4 runs Sunday to Thursday."""
        scheduler.replace_schedule([("sun-thu", "0 6 * * 0-4")])

        # Friday 06:30
        clock.advance(hours=20)
        assert scheduler.due_names() == set()

        # Sunday 06:30
        clock.advance(days=2)
        assert scheduler.due_names() == {"sun-thu"}

    def test_stepped_weekday_range(self, scheduler, clock):
        scheduler.replace_schedule([("every-other-day", "0 6 * * 0-6/2")])

        # Friday 06:30
        clock.advance(hours=20)
        assert scheduler.due_names() == set()

        # Saturday 06:30
        clock.advance(days=1)
        assert scheduler.due_names() == {"every-other-day"}

    def test_restricted_day_fields_match_either(self):
        """Test that "0 0 1 * 1" runs on the 1st and on every Monday."""
        clock = FakeClock(datetime(2026, 1, 18, 12, 0, tzinfo=timezone.utc))
        scheduler = CronScheduler(clock=clock)
        scheduler.replace_schedule([("j", "0 0 1 * 1")])

        # Monday 2026-01-19
        clock.advance(days=1)
        assert scheduler.due_names() == {"j"}

        # Tuesday 2026-01-27, after the Monday firing
        clock.advance(days=8)
        assert scheduler.due_names() == {"j"}

        # Sunday 2026-02-01
        clock.advance(days=5)
        assert scheduler.due_names() == {"j"}

        # Later that Sunday
        clock.advance(hours=11)
        assert scheduler.due_names() == set()


class TestReplaceSchedule:
    """Tests for schedule replacement semantics."""

    def test_empty_expressions_are_not_scheduled(self, scheduler):
        scheduler.replace_schedule([("interval-job", ""), ("cron-job", "0 * * * *")])
        assert scheduler.names == {"cron-job"}

    def test_unchanged_entries_keep_pending_firing(self, scheduler, clock):
        """Test that replacing with the same input every tick is a no-op."""
        scheduler.replace_schedule([("hourly", "0 * * * *")])
        clock.advance(minutes=45)

        scheduler.replace_schedule([("hourly", "0 * * * *")])
        assert scheduler.due_names() == {"hourly"}

    def test_removed_entries_disappear(self, scheduler, clock):
        scheduler.replace_schedule([("a", "0 * * * *"), ("b", "0 * * * *")])
        scheduler.replace_schedule([("a", "0 * * * *")])

        clock.advance(hours=1)
        assert scheduler.names == {"a"}
        assert scheduler.due_names() == {"a"}

    def test_changed_expression_is_rescheduled(self, scheduler, clock):
        scheduler.replace_schedule([("job", "0 * * * *")])
        scheduler.replace_schedule([("job", "0 12 * * *")])

        assert scheduler.expression("job") == "0 12 * * *"
        clock.advance(minutes=45)
        assert scheduler.due_names() == set()

        clock.advance(hours=1)
        assert scheduler.due_names() == {"job"}

    def test_invalid_entries_reported_after_valid_ones_applied(self, scheduler, clock):
        """Test that a bad expression does not block the rest of the schedule."""
        with pytest.raises(CronSyncError) as exc_info:
            scheduler.replace_schedule([("bad", "every day"), ("good", "0 * * * *")])

        assert len(exc_info.value.failures) == 1
        assert "bad" in exc_info.value.failures[0]
        assert scheduler.names == {"good"}

    def test_invalid_replacement_drops_previous_schedule(self, scheduler):
        scheduler.replace_schedule([("job", "0 * * * *")])

        with pytest.raises(CronSyncError):
            scheduler.replace_schedule([("job", "0 * * *")])

        assert scheduler.names == set()

    def test_numeric_weekdays_count_from_sunday(self):
        """Test that day-of-week 0 is Sunday, as in crontab."""
        # 2026-01-15 is a Thursday
        clock = FakeClock()
        scheduler = CronScheduler(clock=clock)
        scheduler.replace_schedule([("sunday", "0 6 * * 0"), ("weekdays", "0 6 * * 1-5")])

        clock.advance(hours=20)
        assert scheduler.due_names() == {"weekdays"}

        clock.advance(days=2)
        assert scheduler.due_names() == {"sunday"}

    def test_timezone_is_configurable(self):
        """Test that expressions are evaluated in the configured zone."""
        clock = FakeClock()
        scheduler = CronScheduler(timezone="Asia/Tokyo", clock=clock)
        # 10:30 UTC is 19:30 in Tokyo
        scheduler.replace_schedule([("evening", "0 20 * * *")])

        clock.advance(minutes=31)
        assert scheduler.due_names() == {"evening"}
