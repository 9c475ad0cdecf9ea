"""Tests for the controller entry point."""

import pytest
from unittest.mock import patch

from release_periodics import main as entry
from release_periodics.config import Settings
from release_periodics.sources.redis_store import InMemoryJobStore


class TestBuildReconciler:
    def test_wires_settings_into_collaborators(self, tmp_path):
        settings = Settings(
            _env_file=None,
            releases_path=str(tmp_path / "releases.json"),
            templates_path=str(tmp_path / "periodics.json"),
            cron_timezone="Europe/Prague",
            job_name_suffix="cron",
        )
        store = InMemoryJobStore()

        reconciler = entry.build_reconciler(settings, store)

        assert reconciler.history is store
        assert reconciler.sink is store
        assert reconciler.releases.path == tmp_path / "releases.json"
        assert reconciler.cron.timezone == "Europe/Prague"
        assert reconciler.job_name_suffix == "cron"


class TestMain:
    """Tests for main()."""

    @pytest.fixture
    def patched(self):
        with patch.object(entry, "setup_logging"), \
                patch.object(entry, "RedisJobStore") as store_cls, \
                patch.object(entry, "PeriodicRunner") as runner_cls:
            yield store_cls.return_value, runner_cls.return_value

    def test_closes_job_store_after_runner_stops(self, patched):
        store, runner = patched

        entry.main()

        runner.start.assert_called_once_with()
        store.close.assert_called_once_with()

    def test_closes_job_store_when_runner_fails(self, patched):
        store, runner = patched
        runner.start.side_effect = RuntimeError("scheduler failed")

        with pytest.raises(RuntimeError):
            entry.main()

        store.close.assert_called_once_with()
