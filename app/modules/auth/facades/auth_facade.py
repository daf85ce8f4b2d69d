# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/facades/auth_facade.py

Fachada del módulo Auth (migración legacy + observabilidad).

Proporciona una interfaz estable para las rutas:
    - login_or_migrate
    - check_migrate_login_rate_limit
    - migration_status
    - flags_status
    - metrics_snapshot / metrics_detailed / timeseries
    - security_stats
    - refresh_population_gauges (job horario)

Cada operación devuelve un AuthFacadeResponse (status HTTP + body + cookie
opcional); la fachada nunca deja escapar excepciones de sus colaboradores:
todo lo inesperado se reporta como INTERNAL_ERROR.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from app.modules.auth.enums import (
    AuthLogLevel,
    ERROR_MESSAGES,
    MigrationErrorCode,
    http_status_for,
)
from app.modules.auth.metrics.store.auth_metrics_store import AuthMetricsStore
from app.modules.auth.services.auth_event_logger import AuthEventLogger
from app.modules.auth.services.feature_flags import FeatureFlags
from app.modules.auth.services.legacy_migration_service import (
    LegacyMigrationService,
    MigrationOutcome,
)
from app.modules.auth.services.security_monitor import SecurityMonitor
from app.modules.auth.services.session_provider import SessionProvider
from app.modules.auth.utils.log_sanitizer import mask_email, normalize_email
from app.shared.security.rate_limit_service import RateLimitService

logger = logging.getLogger(__name__)

MODERN_SIGN_IN_PATH = "/auth/sign-in/email"
MIGRATE_LOGIN_ENDPOINT = "auth:migrate-login"
SESSION_CREATION_FAILED = "SESSION_CREATION_FAILED"
DEFAULT_TIMESERIES_HOURS = 24

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Nivel del login_failure según el código
_FAILURE_LEVELS: Dict[MigrationErrorCode, AuthLogLevel] = {
    MigrationErrorCode.MIGRATION_DISABLED: AuthLogLevel.info,
    MigrationErrorCode.USER_NOT_FOUND: AuthLogLevel.warn,
    MigrationErrorCode.INVALID_PASSWORD: AuthLogLevel.warn,
    MigrationErrorCode.ACCOUNT_DISABLED: AuthLogLevel.warn,
    MigrationErrorCode.INTERNAL_ERROR: AuthLogLevel.error,
}

# Códigos que cuentan como intento fallido para el monitor de seguridad
_CREDENTIAL_FAILURES = frozenset({
    MigrationErrorCode.USER_NOT_FOUND,
    MigrationErrorCode.INVALID_PASSWORD,
})


@dataclass(frozen=True)
class AuthFacadeResponse:
    status_code: int
    body: Dict[str, Any]
    set_cookie: Optional[str] = None


def failure_response(code: MigrationErrorCode, error: Optional[str] = None) -> AuthFacadeResponse:
    return AuthFacadeResponse(
        status_code=http_status_for(code),
        body={
            "success": False,
            "error": error or ERROR_MESSAGES[code],
            "code": code.value,
        },
    )


def _is_blank(value: Optional[str]) -> bool:
    return not isinstance(value, str) or not value.strip()


def parse_hours(raw: Any, default: int = DEFAULT_TIMESERIES_HOURS) -> int:
    """Entero inicial de `raw`; inválido o no positivo -> default."""
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT.match(str(raw)) if raw is not None else None
        if not match:
            return default
        value = int(match.group(1))
    return value if value > 0 else default


class AuthFacade:
    """
    Coordinador entre feature flags, motor de migración, proveedor de
    sesiones, logger de eventos y store de métricas.
    """

    def __init__(
        self,
        *,
        flags: FeatureFlags,
        migration_service: LegacyMigrationService,
        session_provider: SessionProvider,
        events: AuthEventLogger,
        metrics: AuthMetricsStore,
        security_monitor: SecurityMonitor,
        rate_limiter: Optional[RateLimitService] = None,
        migrate_login_limit: int = 20,
        migrate_login_window_sec: int = 300,
    ) -> None:
        self._flags = flags
        self._migration = migration_service
        self._sessions = session_provider
        self._events = events
        self._metrics = metrics
        self._security = security_monitor
        self._rate_limiter = rate_limiter
        self._rl_limit = migrate_login_limit
        self._rl_window = migrate_login_window_sec

    @property
    def flags(self) -> FeatureFlags:
        return self._flags

    @property
    def metrics(self) -> AuthMetricsStore:
        return self._metrics

    # ---------------------- Login / migración ---------------------- #

    def check_migrate_login_rate_limit(
        self,
        request: Optional[Mapping[str, Any]] = None,
    ) -> Optional[AuthFacadeResponse]:
        """
        Devuelve una respuesta 429 si la IP excedió su cuota en
        /auth/migrate-login; None si la solicitud puede continuar.
        """
        if self._rate_limiter is None:
            return None
        ip = (request or {}).get("ip_address")
        result = self._rate_limiter.check_and_consume(
            MIGRATE_LOGIN_ENDPOINT,
            "ip",
            ip,
            limit=self._rl_limit,
            window_sec=self._rl_window,
        )
        if result.allowed:
            return None

        self._security.track_rate_limit_violation(MIGRATE_LOGIN_ENDPOINT, request)
        response = failure_response(MigrationErrorCode.RATE_LIMITED)
        response.body["retryAfter"] = result.retry_after
        return response

    async def login_or_migrate(
        self,
        email: Optional[str],
        password: Optional[str],
        request: Optional[Mapping[str, Any]] = None,
    ) -> AuthFacadeResponse:
        # Precondición: sin efectos secundarios
        if _is_blank(email) or _is_blank(password):
            return failure_response(MigrationErrorCode.MISSING_FIELDS)

        norm_email = normalize_email(email)
        try:
            return await self._login_or_migrate(norm_email, password, request)
        except Exception as e:
            logger.error(
                "[auth-facade] error inesperado en migrate-login para %s: %s",
                mask_email(norm_email),
                type(e).__name__,
            )
            self._events.log_login_failure(
                norm_email,
                MigrationErrorCode.INTERNAL_ERROR.value,
                request,
                level=AuthLogLevel.error,
                auth_method="legacy_migration",
            )
            return failure_response(MigrationErrorCode.INTERNAL_ERROR)

    async def _login_or_migrate(
        self,
        email: str,
        password: str,
        request: Optional[Mapping[str, Any]],
    ) -> AuthFacadeResponse:
        if not self._flags.legacy_migration:
            return self._fail_login(email, MigrationErrorCode.MIGRATION_DISABLED, request)

        result = await self._migration.migrate_on_login(email, password, request)

        if result.outcome == MigrationOutcome.FAIL:
            code = result.code or MigrationErrorCode.INTERNAL_ERROR
            if code in _CREDENTIAL_FAILURES:
                self._security.track_failed_login(email, request, reason=code.value)
            return self._fail_login(email, code, request)

        if result.outcome == MigrationOutcome.ALREADY_MIGRATED:
            logger.debug("[auth-facade] %s ya migrado; se redirige al login moderno", mask_email(email))
            return AuthFacadeResponse(
                status_code=200,
                body={
                    "success": True,
                    "alreadyMigrated": True,
                    "message": "User already migrated. Please use the standard login endpoint.",
                    "redirectTo": MODERN_SIGN_IN_PATH,
                },
            )

        principal = result.principal
        user_payload = principal.to_public_dict() if principal else None

        # La migración ya está confirmada: un fallo de sesión no la revierte
        try:
            session_result = await self._sessions.sign_in_with_password(email, password, request)
        except Exception as e:
            logger.error(
                "[auth-facade] sesión no creada tras migrar %s: %s",
                mask_email(email),
                type(e).__name__,
            )
            self._events.log_login_failure(
                email,
                SESSION_CREATION_FAILED,
                request,
                level=AuthLogLevel.error,
                migrated=True,
                auth_method="legacy_migration",
            )
            return AuthFacadeResponse(
                status_code=200,
                body={
                    "success": True,
                    "migrated": True,
                    "message": "User migrated successfully. Please login again.",
                    "user": user_payload,
                    "session": None,
                    "requiresLogin": True,
                    "requiresReauthentication": True,
                },
            )

        self._security.track_successful_login(request)
        self._events.log_login_success(
            principal.id if principal else None,
            email,
            request,
            migrated=True,
            auth_method="legacy_migration",
        )
        return AuthFacadeResponse(
            status_code=200,
            body={
                "success": True,
                "migrated": True,
                "message": "User successfully migrated and logged in",
                "user": user_payload,
                "session": session_result.session or None,
            },
            set_cookie=session_result.set_cookie,
        )

    def _fail_login(
        self,
        email: str,
        code: MigrationErrorCode,
        request: Optional[Mapping[str, Any]],
    ) -> AuthFacadeResponse:
        self._events.log_login_failure(
            email,
            code.value,
            request,
            level=_FAILURE_LEVELS.get(code, AuthLogLevel.error),
            auth_method="legacy_migration",
        )
        return failure_response(code)

    # ---------------------- Estado de migración ---------------------- #

    async def migration_status(self, email: Optional[str]) -> AuthFacadeResponse:
        if _is_blank(email):
            return failure_response(MigrationErrorCode.MISSING_EMAIL)

        norm_email = normalize_email(email)
        try:
            is_migrated = await self._migration.is_migrated(norm_email)
            is_legacy = await self._migration.is_legacy_known(norm_email)
        except Exception as e:
            logger.error("[auth-facade] migration-status falló: %s", type(e).__name__)
            return failure_response(
                MigrationErrorCode.INTERNAL_ERROR, "Failed to check migration status"
            )

        return AuthFacadeResponse(
            status_code=200,
            body={
                "success": True,
                "migrated": is_migrated,
                "isLegacyUser": is_legacy,
                "email": norm_email,
            },
        )

    # ---------------------- Flags ---------------------- #

    def flags_status(self) -> AuthFacadeResponse:
        try:
            body = {
                "success": True,
                "flags": self._flags.snapshot(),
                "validation": self._flags.validate().to_dict(),
            }
        except Exception as e:
            logger.error("[auth-facade] feature-flags falló: %s", type(e).__name__)
            return failure_response(MigrationErrorCode.INTERNAL_ERROR, "Failed to check feature flags")
        return AuthFacadeResponse(status_code=200, body=body)

    # ---------------------- Métricas ---------------------- #

    def metrics_snapshot(self) -> AuthFacadeResponse:
        try:
            summary = self._metrics.snapshot()
        except Exception as e:
            logger.error("[auth-facade] metrics falló: %s", type(e).__name__)
            return failure_response(MigrationErrorCode.INTERNAL_ERROR, "Failed to retrieve metrics")
        return AuthFacadeResponse(status_code=200, body={"success": True, "metrics": summary})

    def metrics_detailed(self) -> AuthFacadeResponse:
        try:
            detailed = self._metrics.detailed()
        except Exception as e:
            logger.error("[auth-facade] metrics/detailed falló: %s", type(e).__name__)
            return failure_response(
                MigrationErrorCode.INTERNAL_ERROR, "Failed to retrieve detailed metrics"
            )
        return AuthFacadeResponse(status_code=200, body={"success": True, "metrics": detailed})

    def timeseries(self, hours: Any = DEFAULT_TIMESERIES_HOURS) -> AuthFacadeResponse:
        hours_back = parse_hours(hours)
        try:
            points = self._metrics.timeseries(hours_back)
        except Exception as e:
            logger.error("[auth-facade] metrics/timeseries falló: %s", type(e).__name__)
            return failure_response(
                MigrationErrorCode.INTERNAL_ERROR, "Failed to retrieve time-series metrics"
            )
        return AuthFacadeResponse(
            status_code=200,
            body={"success": True, "timeSeries": points, "hoursBack": hours_back},
        )

    def security_stats(self) -> AuthFacadeResponse:
        try:
            stats = self._security.get_security_stats()
        except Exception as e:
            logger.error("[auth-facade] security/stats falló: %s", type(e).__name__)
            return failure_response(
                MigrationErrorCode.INTERNAL_ERROR, "Failed to retrieve security stats"
            )
        return AuthFacadeResponse(status_code=200, body={"success": True, "stats": stats})

    # ---------------------- Job horario ---------------------- #

    async def refresh_population_gauges(self) -> Dict[str, int]:
        """Actualiza pendingLegacyMigrations y totalUsers desde la BD."""
        pending = await self._migration.pending_count()
        total = await self._migration.total_users()
        self._metrics.set_population_gauge("pendingLegacyMigrations", pending)
        self._metrics.set_population_gauge("totalUsers", total)
        return {"pendingLegacyMigrations": pending, "totalUsers": total}


__all__ = [
    "AuthFacade",
    "AuthFacadeResponse",
    "failure_response",
    "parse_hours",
    "MODERN_SIGN_IN_PATH",
]

# Fin del archivo backend/app/modules/auth/facades/auth_facade.py
