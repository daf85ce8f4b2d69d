# -*- coding: utf-8 -*-
"""
backend/tests/shared/scheduler/test_auth_metrics_snapshot_job.py

Tests del job horario de métricas de Auth y de su registro en el
SchedulerService.

Autor: Ixchel Beristain
Fecha: 2025-11-07
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.modules.auth.metrics.store.auth_metrics_store import AuthMetricsStore
from app.shared.scheduler import SchedulerService, get_scheduler, reset_scheduler
from app.shared.scheduler.jobs import (
    AUTH_METRICS_SNAPSHOT_JOB_ID as JOB_ID,
    register_auth_metrics_snapshot_job,
    run_auth_metrics_snapshot,
)

NOW = datetime(2025, 11, 19, 13, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return AuthMetricsStore(clock=lambda: NOW)


def _container(store, refresh):
    facade = MagicMock()
    facade.refresh_population_gauges = refresh
    return SimpleNamespace(facade=facade, metrics=store)


class TestRunSnapshot:
    async def test_refreshes_and_captures(self, store):
        async def refresh():
            store.set_population_gauge("pendingLegacyMigrations", 3)
            return {"pendingLegacyMigrations": 3, "totalUsers": 0}

        point = await run_auth_metrics_snapshot(_container(store, refresh))

        assert point["timestamp"] == "2025-11-19T13:00:00.000Z"
        assert point["legacyMigration"]["pending"] == 3
        assert store.timeseries_length() == 1

    async def test_refresh_failure_still_captures(self, store):
        refresh = AsyncMock(side_effect=RuntimeError("db down"))

        point = await run_auth_metrics_snapshot(_container(store, refresh))

        refresh.assert_awaited_once()
        assert point["population"] == {"totalUsers": 0, "pendingLegacyMigrations": 0}
        assert store.timeseries_length() == 1


class TestRegistration:
    def test_job_is_hourly(self, store):
        scheduler = SchedulerService()

        job_id = register_auth_metrics_snapshot_job(scheduler, _container(store, AsyncMock()))

        jobs = scheduler.get_jobs()
        assert job_id == JOB_ID
        assert [j["id"] for j in jobs] == [JOB_ID]
        assert "minute='0'" in jobs[0]["trigger"]

    def test_register_twice_replaces(self, store):
        scheduler = SchedulerService()
        register_auth_metrics_snapshot_job(scheduler, _container(store, AsyncMock()))
        register_auth_metrics_snapshot_job(scheduler, _container(store, AsyncMock()))
        assert len(scheduler.get_jobs()) == 1

    def test_invalid_cron_expression(self):
        with pytest.raises(ValueError):
            SchedulerService().add_cron_job(lambda: None, "bad", "* * *")

    def test_remove_job(self):
        scheduler = SchedulerService()
        scheduler.add_cron_job(lambda: None, "tmp", "*/5 * * * *")
        assert scheduler.remove_job("tmp") is True
        assert scheduler.remove_job("tmp") is False

    async def test_start_and_shutdown(self):
        scheduler = SchedulerService()
        scheduler.start()
        assert scheduler.is_running is True
        scheduler.shutdown()
        assert scheduler.is_running is False

    def test_singleton(self):
        reset_scheduler()
        assert get_scheduler() is get_scheduler()
        reset_scheduler()

# Fin del archivo backend/tests/shared/scheduler/test_auth_metrics_snapshot_job.py
