# -*- coding: utf-8 -*-
"""
backend/tests/modules/auth/routes/test_migration_routes.py

Contrato HTTP de las rutas de migración (/auth/migrate-login,
/auth/migration-status, /auth/feature-flags, /auth/security/stats).

- App real (create_app) con el handler de validación
- AuthFacade sustituida vía dependency_overrides

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.modules.auth.dependencies import get_auth_facade
from app.modules.auth.enums import MigrationErrorCode
from app.modules.auth.facades import AuthFacadeResponse, failure_response

SET_COOKIE = "campus.session_token=tok-123; HttpOnly; Max-Age=3600; Path=/; SameSite=Lax"


@pytest.fixture
def facade():
    mock = MagicMock()
    mock.check_migrate_login_rate_limit = MagicMock(return_value=None)
    mock.login_or_migrate = AsyncMock(
        return_value=AuthFacadeResponse(
            status_code=200,
            body={"success": True, "migrated": True, "message": "ok", "user": {"id": "m-1"}, "session": {"id": "s-1"}},
            set_cookie=SET_COOKIE,
        )
    )
    mock.migration_status = AsyncMock(
        return_value=AuthFacadeResponse(
            status_code=200,
            body={"success": True, "migrated": True, "isLegacyUser": True, "email": "a@b.co"},
        )
    )
    return mock


@pytest.fixture
def client(facade):
    app = create_app()
    app.dependency_overrides[get_auth_facade] = lambda: facade
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestMigrateLogin:
    def test_forwards_body_status_and_cookie(self, client, facade):
        response = client.post(
            "/auth/migrate-login",
            json={"email": "alice@example.com", "password": "pw"},
            headers={"user-agent": "pytest-agent"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json; charset=utf-8"
        assert response.headers["set-cookie"] == SET_COOKIE
        assert response.json()["migrated"] is True

        email, password, meta = facade.login_or_migrate.await_args.args
        assert (email, password) == ("alice@example.com", "pw")
        assert meta["user_agent"] == "pytest-agent"
        assert meta["path"] == "/auth/migrate-login"

    def test_missing_body_reaches_facade_with_none(self, client, facade):
        facade.login_or_migrate.return_value = failure_response(MigrationErrorCode.MISSING_FIELDS)

        response = client.post("/auth/migrate-login")

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELDS"
        args = facade.login_or_migrate.await_args.args
        assert args[0] is None and args[1] is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"json": {"email": 123, "password": "pw"}},
            {"content": b"{not json", "headers": {"content-type": "application/json"}},
        ],
    )
    def test_malformed_body_is_400_missing_fields(self, client, facade, kwargs):
        response = client.post("/auth/migrate-login", **kwargs)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Email and password are required",
            "code": "MISSING_FIELDS",
        }
        facade.login_or_migrate.assert_not_awaited()

    def test_rate_limited_sets_retry_after(self, client, facade):
        limited = failure_response(MigrationErrorCode.RATE_LIMITED)
        limited.body["retryAfter"] = 42
        facade.check_migrate_login_rate_limit.return_value = limited

        response = client.post("/auth/migrate-login", json={"email": "a@b.co", "password": "pw"})

        assert response.status_code == 429
        assert response.headers["retry-after"] == "42"
        assert response.json()["code"] == "RATE_LIMITED"
        facade.login_or_migrate.assert_not_awaited()


class TestReadEndpoints:
    def test_migration_status_passes_query(self, client, facade):
        response = client.get("/auth/migration-status", params={"email": "a@b.co"})

        assert response.status_code == 200
        assert response.json()["isLegacyUser"] is True
        facade.migration_status.assert_awaited_once_with("a@b.co")

    def test_migration_status_without_email(self, client, facade):
        facade.migration_status.return_value = failure_response(MigrationErrorCode.MISSING_EMAIL)

        response = client.get("/auth/migration-status")

        assert response.status_code == 400
        facade.migration_status.assert_awaited_once_with(None)

    def test_feature_flags(self, client, facade):
        facade.flags_status.return_value = AuthFacadeResponse(
            status_code=200,
            body={
                "success": True,
                "flags": {"legacyMigration": True, "modernAuth": False},
                "validation": {"ok": True, "warnings": []},
            },
        )

        response = client.get("/auth/feature-flags")

        assert response.status_code == 200
        assert response.json()["flags"]["legacyMigration"] is True

    def test_security_stats_error_is_500(self, client, facade):
        facade.security_stats.return_value = failure_response(
            MigrationErrorCode.INTERNAL_ERROR, "Failed to retrieve security stats"
        )

        response = client.get("/auth/security/stats")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to retrieve security stats"

# Fin del archivo backend/tests/modules/auth/routes/test_migration_routes.py
