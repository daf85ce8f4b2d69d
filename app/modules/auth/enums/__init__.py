# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/enums/__init__.py

Export central de enums de autenticación.

- UserRole: roles de la plataforma (student, teacher, chapter_admin, ...)
- MigrationErrorCode: códigos de error estables del flujo de migración
- AuthEvent / AuthLogLevel: catálogo de eventos y niveles del logger
- OAuthProvider: proveedores OAuth con contadores propios

Autor: Ixchel Beristain
Fecha: 23/10/2025
"""

from .role_enum import UserRole, user_role_db_enum
from .migration_error_code_enum import (
    MigrationErrorCode,
    HTTP_STATUS_BY_CODE,
    ERROR_MESSAGES,
    http_status_for,
)
from .auth_event_enum import (
    AuthEvent,
    AuthLogLevel,
    OAuthProvider,
    OAUTH_EVENTS,
    SESSION_END_EVENTS,
)

__all__ = [
    "UserRole",
    "user_role_db_enum",
    "MigrationErrorCode",
    "HTTP_STATUS_BY_CODE",
    "ERROR_MESSAGES",
    "http_status_for",
    "AuthEvent",
    "AuthLogLevel",
    "OAuthProvider",
    "OAUTH_EVENTS",
    "SESSION_END_EVENTS",
]

# Fin del archivo backend/app/modules/auth/enums/__init__.py
