# -*- coding: utf-8 -*-
"""
backend/tests/modules/auth/test_auth_facade.py

Tests de la fachada AuthFacade.

Objetivo:
- Verificar el mapeo resultado del motor -> respuesta HTTP
- Verificar un solo login_* por llamada y el nivel correcto
- Usar dobles (AsyncMock) para motor y proveedor de sesiones; logger,
  store de métricas y monitor de seguridad son reales
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.modules.auth.enums import MigrationErrorCode
from app.modules.auth.facades.auth_facade import AuthFacade, parse_hours
from app.modules.auth.services.legacy_migration_service import (
    MigratedPrincipal,
    MigrationResult,
)
from app.modules.auth.services.security_monitor import SecurityMonitor
from app.modules.auth.services.session_provider import SessionCreationError, SessionResult
from app.shared.security.rate_limit_service import RateLimitService

REQUEST = {"ip_address": "203.0.113.9", "user_agent": "pytest", "method": "POST", "path": "/auth/migrate-login"}

PRINCIPAL = MigratedPrincipal(
    id="modern-new",
    legacy_id="legacy-1",
    email="alice@example.com",
    name="Alice Doe",
    first_name="Alice",
    last_name="Doe",
    role="teacher",
    chapter_id="chapter-7",
    email_verified=True,
)


@pytest.fixture
def migration_service():
    service = MagicMock()
    service.migrate_on_login = AsyncMock(return_value=MigrationResult.migrated(PRINCIPAL))
    service.is_migrated = AsyncMock(return_value=False)
    service.is_legacy_known = AsyncMock(return_value=True)
    service.pending_count = AsyncMock(return_value=12)
    service.total_users = AsyncMock(return_value=40)
    return service


@pytest.fixture
def session_provider():
    provider = MagicMock()
    provider.sign_in_with_password = AsyncMock(
        return_value=SessionResult(
            session={"id": "s-1", "userId": "modern-new", "expiresAt": "2025-11-26T12:00:00.000Z"},
            set_cookie="campus.session_token=tok; HttpOnly; Path=/",
        )
    )
    return provider


@pytest.fixture
def security_monitor(event_logger):
    return SecurityMonitor(event_logger, failed_attempts_threshold=3, window_seconds=900)


@pytest.fixture
def facade(flags_on, migration_service, session_provider, event_logger, metrics_store, security_monitor):
    return AuthFacade(
        flags=flags_on,
        migration_service=migration_service,
        session_provider=session_provider,
        events=event_logger,
        metrics=metrics_store,
        security_monitor=security_monitor,
        rate_limiter=RateLimitService(enabled=True),
        migrate_login_limit=2,
        migrate_login_window_sec=60,
    )


class TestLoginOrMigrate:
    async def test_migrated_with_session(self, facade, recording_sink, metrics_store, session_provider):
        response = await facade.login_or_migrate("Alice@Example.com", "pw", REQUEST)

        assert response.status_code == 200
        assert response.body["success"] is True
        assert response.body["migrated"] is True
        assert response.body["message"] == "User successfully migrated and logged in"
        assert response.body["user"]["id"] == "modern-new"
        assert response.body["user"]["legacyId"] == "legacy-1"
        assert response.body["session"]["id"] == "s-1"
        assert response.set_cookie.startswith("campus.session_token=tok")
        session_provider.sign_in_with_password.assert_awaited_once_with("alice@example.com", "pw", REQUEST)

        successes = recording_sink.events("login_success")
        assert len(successes) == 1
        assert successes[0]["migrated"] is True
        assert successes[0]["ip_address"] == "203.0.113.9"
        assert recording_sink.events("login_failure") == []
        assert metrics_store.counters()["login"] == {"success": 1, "failure": 0}

    async def test_already_migrated_redirects(self, facade, migration_service, recording_sink, session_provider):
        migration_service.migrate_on_login.return_value = MigrationResult.already_migrated()

        response = await facade.login_or_migrate("alice@example.com", "pw", REQUEST)

        assert response.status_code == 200
        assert response.body == {
            "success": True,
            "alreadyMigrated": True,
            "message": "User already migrated. Please use the standard login endpoint.",
            "redirectTo": "/auth/sign-in/email",
        }
        session_provider.sign_in_with_password.assert_not_awaited()
        assert recording_sink.lines == []

    @pytest.mark.parametrize(
        "code,status,level",
        [
            (MigrationErrorCode.USER_NOT_FOUND, 401, "warn"),
            (MigrationErrorCode.INVALID_PASSWORD, 401, "warn"),
            (MigrationErrorCode.ACCOUNT_DISABLED, 403, "warn"),
            (MigrationErrorCode.INTERNAL_ERROR, 500, "error"),
        ],
    )
    async def test_failures_are_mapped(self, facade, migration_service, recording_sink, code, status, level):
        migration_service.migrate_on_login.return_value = MigrationResult.fail(code)

        response = await facade.login_or_migrate("alice@example.com", "pw", REQUEST)

        assert response.status_code == status
        assert response.body["success"] is False
        assert response.body["code"] == code.value
        failures = recording_sink.events("login_failure")
        assert len(failures) == 1
        assert failures[0]["reason"] == code.value
        assert failures[0]["level"] == level

    async def test_invalid_password_is_tracked_by_security_monitor(
        self, facade, migration_service, security_monitor,
    ):
        migration_service.migrate_on_login.return_value = MigrationResult.fail(
            MigrationErrorCode.INVALID_PASSWORD
        )

        await facade.login_or_migrate("alice@example.com", "pw", REQUEST)

        assert security_monitor.failed_attempt_count("203.0.113.9") == 1

    @pytest.mark.parametrize(
        "email,password",
        [(None, "pw"), ("", "pw"), ("   ", "pw"), ("alice@example.com", None), ("alice@example.com", "  ")],
    )
    async def test_missing_fields_has_no_side_effects(
        self, facade, migration_service, recording_sink, metrics_store, email, password,
    ):
        response = await facade.login_or_migrate(email, password, REQUEST)

        assert response.status_code == 400
        assert response.body == {
            "success": False,
            "error": "Email and password are required",
            "code": "MISSING_FIELDS",
        }
        migration_service.migrate_on_login.assert_not_awaited()
        assert recording_sink.lines == []
        assert metrics_store.counters()["login"] == {"success": 0, "failure": 0}

    async def test_disabled_flag_returns_403_at_info(
        self, flags_off, migration_service, session_provider, event_logger, metrics_store,
        security_monitor, recording_sink,
    ):
        facade = AuthFacade(
            flags=flags_off,
            migration_service=migration_service,
            session_provider=session_provider,
            events=event_logger,
            metrics=metrics_store,
            security_monitor=security_monitor,
        )

        response = await facade.login_or_migrate("alice@example.com", "pw", REQUEST)

        assert response.status_code == 403
        assert response.body["code"] == "MIGRATION_DISABLED"
        migration_service.migrate_on_login.assert_not_awaited()
        failures = recording_sink.events("login_failure")
        assert len(failures) == 1
        assert failures[0]["level"] == "info"

    async def test_session_failure_after_migration(
        self, facade, session_provider, recording_sink, metrics_store,
    ):
        session_provider.sign_in_with_password.side_effect = SessionCreationError("boom")

        response = await facade.login_or_migrate("alice@example.com", "pw", REQUEST)

        assert response.status_code == 200
        assert response.set_cookie is None
        assert response.body["migrated"] is True
        assert response.body["session"] is None
        assert response.body["requiresLogin"] is True
        assert response.body["requiresReauthentication"] is True
        assert response.body["message"] == "User migrated successfully. Please login again."
        failures = recording_sink.events("login_failure")
        assert len(failures) == 1
        assert failures[0]["reason"] == "SESSION_CREATION_FAILED"
        assert metrics_store.counters()["login"] == {"success": 0, "failure": 1}

    async def test_unexpected_exception_is_remapped(self, facade, migration_service, recording_sink):
        migration_service.migrate_on_login.side_effect = RuntimeError("kaboom")

        response = await facade.login_or_migrate("alice@example.com", "pw", REQUEST)

        assert response.status_code == 500
        assert response.body["code"] == "INTERNAL_ERROR"
        assert "kaboom" not in str(response.body)
        assert recording_sink.events("login_failure")[0]["level"] == "error"

    async def test_password_never_reaches_logs(self, facade, recording_sink):
        await facade.login_or_migrate("alice@example.com", "S3cret-Value!", REQUEST)

        assert recording_sink.raw
        assert all("S3cret-Value!" not in line for line in recording_sink.raw)


class TestRateLimit:
    def test_limit_then_429(self, facade, recording_sink, metrics_store):
        assert facade.check_migrate_login_rate_limit(REQUEST) is None
        assert facade.check_migrate_login_rate_limit(REQUEST) is None

        limited = facade.check_migrate_login_rate_limit(REQUEST)

        assert limited.status_code == 429
        assert limited.body["code"] == "RATE_LIMITED"
        assert limited.body["retryAfter"] >= 1
        assert len(recording_sink.events("rate_limit_exceeded")) == 1
        assert metrics_store.counters()["security"]["rateLimitViolations"] == 1

    def test_without_rate_limiter(self, facade):
        facade._rate_limiter = None
        assert facade.check_migrate_login_rate_limit(REQUEST) is None


class TestMigrationStatus:
    async def test_status(self, facade, migration_service):
        response = await facade.migration_status("  Alice@Example.COM ")

        assert response.status_code == 200
        assert response.body == {
            "success": True,
            "migrated": False,
            "isLegacyUser": True,
            "email": "alice@example.com",
        }
        migration_service.is_migrated.assert_awaited_once_with("alice@example.com")

    async def test_missing_email(self, facade):
        response = await facade.migration_status(None)

        assert response.status_code == 400
        assert response.body["code"] == "MISSING_EMAIL"

    async def test_store_error(self, facade, migration_service):
        migration_service.is_migrated.side_effect = RuntimeError("db down")

        response = await facade.migration_status("alice@example.com")

        assert response.status_code == 500
        assert response.body == {
            "success": False,
            "error": "Failed to check migration status",
            "code": "INTERNAL_ERROR",
        }


class TestObservabilityOperations:
    def test_flags_status(self, facade):
        response = facade.flags_status()

        assert response.status_code == 200
        assert response.body["flags"] == {"legacyMigration": True, "modernAuth": True}
        assert response.body["validation"] == {"ok": True, "warnings": []}

    def test_metrics_snapshot_and_detailed(self, facade, event_logger):
        event_logger.log_login_success("u1", "a@b.co")

        summary = facade.metrics_snapshot().body["metrics"]
        detailed = facade.metrics_detailed().body["metrics"]

        assert summary["authentication"]["loginSuccessRate"] == "100.00%"
        assert detailed["counters"]["login"]["success"] == 1
        assert detailed["rates"]["loginSuccessRate"] == "100.00"

    def test_timeseries_default_hours(self, facade, metrics_store):
        metrics_store.capture_snapshot()

        response = facade.timeseries("abc")

        assert response.body["hoursBack"] == 24
        assert len(response.body["timeSeries"]) == 1

    def test_security_stats(self, facade):
        body = facade.security_stats().body
        assert body["success"] is True
        assert body["stats"]["suspicious_ips"] == 0

    async def test_refresh_population_gauges(self, facade, metrics_store):
        population = await facade.refresh_population_gauges()

        assert population == {"pendingLegacyMigrations": 12, "totalUsers": 40}
        assert metrics_store.population() == {"totalUsers": 40, "pendingLegacyMigrations": 12}


class TestParseHours:
    @pytest.mark.parametrize(
        "raw,expected",
        [(None, 24), ("", 24), ("abc", 24), ("0", 24), ("-3", 24), ("6", 6), ("12h", 12), (48, 48), (True, 24)],
    )
    def test_parse_hours(self, raw, expected):
        assert parse_hours(raw) == expected

# Fin del archivo backend/tests/modules/auth/test_auth_facade.py
