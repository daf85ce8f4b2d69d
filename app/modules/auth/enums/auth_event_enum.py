# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/enums/auth_event_enum.py

Catálogo cerrado de eventos de autenticación y niveles de log.

Cada AuthEvent corresponde a un contador del AuthMetricsStore; el
AuthEventLogger los usa para enrutar el registro y para el fan-out
hacia métricas.

Autor: Ixchel Beristain
Fecha: 23/10/2025
"""
from enum import StrEnum


class AuthLogLevel(StrEnum):
    info = "info"
    warn = "warn"
    error = "error"
    security = "security"


class AuthEvent(StrEnum):
    # Login
    login_success = "login_success"
    login_failure = "login_failure"
    # Registro
    registration_success = "registration_success"
    registration_failure = "registration_failure"
    # Reset de contraseña
    password_reset_request = "password_reset_request"
    password_reset_success = "password_reset_success"
    password_reset_failure = "password_reset_failure"
    # Verificación de email
    email_verification_sent = "email_verification_sent"
    email_verification_success = "email_verification_success"
    email_verification_failure = "email_verification_failure"
    # 2FA
    two_factor_enabled = "two_factor_enabled"
    two_factor_disabled = "two_factor_disabled"
    two_factor_verify_success = "two_factor_verify_success"
    two_factor_verify_failure = "two_factor_verify_failure"
    # OAuth (requiere proveedor)
    oauth_success = "oauth_success"
    oauth_failure = "oauth_failure"
    # Sesiones
    session_created = "session_created"
    session_invalidated = "session_invalidated"
    session_expired = "session_expired"
    # Seguridad
    rate_limit_exceeded = "rate_limit_exceeded"
    suspicious_activity = "suspicious_activity"
    blocked_ip = "blocked_ip"
    # Migración legacy
    legacy_migration_success = "legacy_migration_success"
    legacy_migration_failure = "legacy_migration_failure"


# Eventos que exigen un proveedor OAuth
OAUTH_EVENTS = frozenset({AuthEvent.oauth_success, AuthEvent.oauth_failure})

# Eventos que pueden acumular duración de sesión
SESSION_END_EVENTS = frozenset({AuthEvent.session_invalidated, AuthEvent.session_expired})


class OAuthProvider(StrEnum):
    google = "google"
    github = "github"
    facebook = "facebook"
    apple = "apple"
    microsoft = "microsoft"


__all__ = [
    "AuthLogLevel",
    "AuthEvent",
    "OAuthProvider",
    "OAUTH_EVENTS",
    "SESSION_END_EVENTS",
]

# Fin del archivo backend/app/modules/auth/enums/auth_event_enum.py
