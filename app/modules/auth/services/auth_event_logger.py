# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/auth_event_logger.py

Logger estructurado de eventos de autenticación.

Cada evento se emite como UNA línea JSON:
    {"timestamp": "...Z", "level": "warn", "event": "login_failure", ...}

Flujo de emit():
1. Valida que el evento sea rastreable por el store de métricas.
2. Construye el registro, lo sanitiza (llaves sensibles fuera, email
   enmascarado) y lo serializa.
3. Escribe en el LogSink según el nivel.
4. Publica el evento en el MetricsSink.

Si el paso 1 o el 3 fallan, el evento se descarta completo (ni log ni
métrica) y se incrementa `dropped_events`.

Autor: Ixchel Beristain
Fecha: 02/11/2025
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from app.modules.auth.enums import AuthEvent, AuthLogLevel
from app.modules.auth.metrics.store.auth_metrics_store import AuthMetricsStore, to_rfc3339
from app.modules.auth.services.auth_event_sinks import (
    AuthEventRecord,
    LoggerSink,
    LogSink,
    MetricsSink,
    write_to_sink,
)
from app.modules.auth.utils.log_sanitizer import sanitize
from app.shared.http_utils.request_meta import compact_request_meta

logger = logging.getLogger(__name__)

# Nivel por defecto de cada evento
DEFAULT_LEVELS: Dict[AuthEvent, AuthLogLevel] = {
    AuthEvent.login_success: AuthLogLevel.info,
    AuthEvent.login_failure: AuthLogLevel.warn,
    AuthEvent.registration_success: AuthLogLevel.info,
    AuthEvent.registration_failure: AuthLogLevel.warn,
    AuthEvent.password_reset_request: AuthLogLevel.info,
    AuthEvent.password_reset_success: AuthLogLevel.info,
    AuthEvent.password_reset_failure: AuthLogLevel.warn,
    AuthEvent.email_verification_sent: AuthLogLevel.info,
    AuthEvent.email_verification_success: AuthLogLevel.info,
    AuthEvent.email_verification_failure: AuthLogLevel.warn,
    AuthEvent.two_factor_enabled: AuthLogLevel.info,
    AuthEvent.two_factor_disabled: AuthLogLevel.info,
    AuthEvent.two_factor_verify_success: AuthLogLevel.info,
    AuthEvent.two_factor_verify_failure: AuthLogLevel.warn,
    AuthEvent.oauth_success: AuthLogLevel.info,
    AuthEvent.oauth_failure: AuthLogLevel.warn,
    AuthEvent.session_created: AuthLogLevel.info,
    AuthEvent.session_invalidated: AuthLogLevel.info,
    AuthEvent.session_expired: AuthLogLevel.info,
    AuthEvent.rate_limit_exceeded: AuthLogLevel.security,
    AuthEvent.suspicious_activity: AuthLogLevel.security,
    AuthEvent.blocked_ip: AuthLogLevel.security,
    AuthEvent.legacy_migration_success: AuthLogLevel.info,
    AuthEvent.legacy_migration_failure: AuthLogLevel.error,
}

RequestMeta = Optional[Mapping[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthEventLogger:
    """
    Publica eventos de autenticación en dos suscriptores: el sink de log
    y el sink de métricas.
    """

    def __init__(
        self,
        metrics: AuthMetricsStore,
        sink: Optional[LogSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._metrics_sink = MetricsSink(metrics)
        self._sink: LogSink = sink or LoggerSink()
        self._clock = clock or _utcnow
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def metrics(self) -> AuthMetricsStore:
        return self._metrics_sink.store

    @property
    def dropped_events(self) -> int:
        with self._lock:
            return self._dropped

    def _drop(self) -> None:
        with self._lock:
            self._dropped += 1

    # ------------------------------------------------------------------
    # Núcleo
    # ------------------------------------------------------------------
    def build_entry(self, record: AuthEventRecord, request: RequestMeta = None) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": to_rfc3339(self._clock()),
            "level": record.level.value,
            "event": record.event.value,
        }
        for key, value in record.attributes.items():
            # La cabecera (timestamp/level/event) no se puede sobrescribir
            if value is not None and key not in entry:
                entry[key] = value
        if record.provider is not None:
            entry.setdefault("provider", record.provider)
        if record.duration_seconds is not None:
            entry.setdefault("duration_seconds", record.duration_seconds)
        entry.update(compact_request_meta(request))
        return sanitize(entry)

    def emit(
        self,
        event: AuthEvent | str,
        *,
        level: Optional[AuthLogLevel | str] = None,
        request: RequestMeta = None,
        provider: Optional[str] = None,
        duration_seconds: Optional[float] = None,
        **attributes: Any,
    ) -> bool:
        """
        Emite un evento. Devuelve False si se descartó.
        """
        try:
            kind = AuthEvent(event)
        except ValueError:
            logger.warning("[auth-events] evento desconocido descartado: %r", event)
            self._drop()
            return False

        record = AuthEventRecord(
            event=kind,
            level=AuthLogLevel(level) if level is not None else DEFAULT_LEVELS[kind],
            attributes=dict(attributes),
            provider=provider.lower() if isinstance(provider, str) else provider,
            duration_seconds=duration_seconds,
        )

        if not self._metrics_sink.accepts(record):
            logger.warning(
                "[auth-events] evento no rastreable descartado: event=%s provider=%s",
                kind.value,
                record.provider,
            )
            self._drop()
            return False

        line = json.dumps(self.build_entry(record, request), ensure_ascii=False, default=str)

        try:
            write_to_sink(self._sink, record.level, line)
        except Exception as e:
            # Sin línea de log no hay métrica: ambos suscriptores quedan alineados
            logger.warning("[auth-events] sink falló, evento %s descartado: %s", kind.value, e)
            self._drop()
            return False

        self._metrics_sink.publish(record)
        return True

    # -------------------- Login -------------------- #

    def log_login_success(
        self,
        user_id: Optional[str],
        email: Optional[str],
        request: RequestMeta = None,
        **extra: Any,
    ) -> bool:
        return self.emit(
            AuthEvent.login_success,
            request=request,
            user_id=user_id,
            email=email,
            success=True,
            **extra,
        )

    def log_login_failure(
        self,
        email: Optional[str],
        reason: str,
        request: RequestMeta = None,
        *,
        level: AuthLogLevel = AuthLogLevel.warn,
        **extra: Any,
    ) -> bool:
        return self.emit(
            AuthEvent.login_failure,
            level=level,
            request=request,
            email=email,
            success=False,
            reason=str(reason),
            **extra,
        )

    # -------------------- Registro -------------------- #

    def log_registration_success(self, user_id: str, email: str, role: Optional[str] = None,
                                 request: RequestMeta = None, **extra: Any) -> bool:
        return self.emit(AuthEvent.registration_success, request=request, user_id=user_id,
                         email=email, role=role, success=True, **extra)

    def log_registration_failure(self, email: str, reason: str, request: RequestMeta = None,
                                 **extra: Any) -> bool:
        return self.emit(AuthEvent.registration_failure, request=request, email=email,
                         success=False, reason=reason, **extra)

    # -------------------- Password reset -------------------- #

    def log_password_reset_request(self, email: str, request: RequestMeta = None, **extra: Any) -> bool:
        return self.emit(AuthEvent.password_reset_request, request=request, email=email, **extra)

    def log_password_reset_success(self, user_id: str, email: str, request: RequestMeta = None,
                                   **extra: Any) -> bool:
        return self.emit(AuthEvent.password_reset_success, request=request, user_id=user_id,
                         email=email, success=True, **extra)

    def log_password_reset_failure(self, email: str, reason: str, request: RequestMeta = None,
                                   **extra: Any) -> bool:
        return self.emit(AuthEvent.password_reset_failure, request=request, email=email,
                         success=False, reason=reason, **extra)

    # -------------------- Verificación de email -------------------- #

    def log_email_verification_sent(self, user_id: str, email: str, **extra: Any) -> bool:
        return self.emit(AuthEvent.email_verification_sent, user_id=user_id, email=email, **extra)

    def log_email_verification_success(self, user_id: str, email: str, request: RequestMeta = None,
                                       **extra: Any) -> bool:
        return self.emit(AuthEvent.email_verification_success, request=request, user_id=user_id,
                         email=email, success=True, **extra)

    def log_email_verification_failure(self, email: str, reason: str, request: RequestMeta = None,
                                       **extra: Any) -> bool:
        return self.emit(AuthEvent.email_verification_failure, request=request, email=email,
                         success=False, reason=reason, **extra)

    # -------------------- 2FA -------------------- #

    def log_two_factor_enabled(self, user_id: str, email: str, request: RequestMeta = None) -> bool:
        return self.emit(AuthEvent.two_factor_enabled, request=request, user_id=user_id, email=email)

    def log_two_factor_disabled(self, user_id: str, email: str, request: RequestMeta = None) -> bool:
        return self.emit(AuthEvent.two_factor_disabled, request=request, user_id=user_id, email=email)

    def log_two_factor_verify(self, user_id: str, email: str, success: bool,
                              request: RequestMeta = None, **extra: Any) -> bool:
        event = AuthEvent.two_factor_verify_success if success else AuthEvent.two_factor_verify_failure
        return self.emit(event, request=request, user_id=user_id, email=email, success=success, **extra)

    # -------------------- OAuth -------------------- #

    def log_oauth(self, provider: str, success: bool, email: Optional[str] = None,
                  request: RequestMeta = None, **extra: Any) -> bool:
        event = AuthEvent.oauth_success if success else AuthEvent.oauth_failure
        return self.emit(event, request=request, provider=provider, email=email, success=success, **extra)

    # -------------------- Sesiones -------------------- #

    def log_session_created(
        self,
        user_id: str,
        session_id: str,
        email: Optional[str] = None,
        request: RequestMeta = None,
    ) -> bool:
        return self.emit(
            AuthEvent.session_created,
            request=request,
            user_id=user_id,
            session_id=session_id,
            email=email,
        )

    def log_session_invalidated(self, user_id: str, session_id: str,
                                duration_seconds: Optional[float] = None, reason: str = "logout") -> bool:
        return self.emit(AuthEvent.session_invalidated, duration_seconds=duration_seconds,
                         user_id=user_id, session_id=session_id, reason=reason)

    def log_session_expired(self, user_id: str, session_id: str,
                            duration_seconds: Optional[float] = None) -> bool:
        return self.emit(AuthEvent.session_expired, duration_seconds=duration_seconds,
                         user_id=user_id, session_id=session_id)

    # -------------------- Seguridad -------------------- #

    def log_rate_limit_exceeded(self, endpoint: str, request: RequestMeta = None, **extra: Any) -> bool:
        return self.emit(AuthEvent.rate_limit_exceeded, request=request, endpoint=endpoint, **extra)

    def log_suspicious_activity(self, description: str, request: RequestMeta = None, **extra: Any) -> bool:
        return self.emit(AuthEvent.suspicious_activity, request=request, description=description, **extra)

    def log_blocked_ip(self, ip_address: str, reason: str, **extra: Any) -> bool:
        return self.emit(AuthEvent.blocked_ip, blocked_ip=ip_address, reason=reason, **extra)

    # -------------------- Migración legacy -------------------- #

    def log_legacy_migration_success(
        self,
        email: str,
        modern_user_id: str,
        legacy_user_id: Optional[str] = None,
        request: RequestMeta = None,
    ) -> bool:
        return self.emit(
            AuthEvent.legacy_migration_success,
            request=request,
            email=email,
            user_id=modern_user_id,
            legacy_user_id=legacy_user_id,
            success=True,
        )

    def log_legacy_migration_failure(
        self,
        email: str,
        reason: str,
        request: RequestMeta = None,
        **extra: Any,
    ) -> bool:
        return self.emit(
            AuthEvent.legacy_migration_failure,
            request=request,
            email=email,
            success=False,
            reason=reason,
            **extra,
        )


__all__ = ["AuthEventLogger", "DEFAULT_LEVELS"]

# Fin del archivo backend/app/modules/auth/services/auth_event_logger.py
