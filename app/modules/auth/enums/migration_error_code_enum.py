# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/enums/migration_error_code_enum.py

Códigos de error estables del flujo de migración legacy.

El `code` viaja al cliente tal cual; HTTP_STATUS_BY_CODE fija el status
HTTP de cada uno. USER_NOT_FOUND e INVALID_PASSWORD comparten 401 para
no facilitar la enumeración de cuentas.

Autor: Ixchel Beristain
Fecha: 23/10/2025
"""
from enum import StrEnum
from typing import Dict


class MigrationErrorCode(StrEnum):
    MISSING_FIELDS = "MISSING_FIELDS"
    MISSING_EMAIL = "MISSING_EMAIL"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    MIGRATION_DISABLED = "MIGRATION_DISABLED"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


HTTP_STATUS_BY_CODE: Dict[MigrationErrorCode, int] = {
    MigrationErrorCode.MISSING_FIELDS: 400,
    MigrationErrorCode.MISSING_EMAIL: 400,
    MigrationErrorCode.USER_NOT_FOUND: 401,
    MigrationErrorCode.INVALID_PASSWORD: 401,
    MigrationErrorCode.ACCOUNT_DISABLED: 403,
    MigrationErrorCode.MIGRATION_DISABLED: 403,
    MigrationErrorCode.RATE_LIMITED: 429,
    MigrationErrorCode.INTERNAL_ERROR: 500,
}

# Mensajes legibles (en inglés: los consume el frontend existente)
ERROR_MESSAGES: Dict[MigrationErrorCode, str] = {
    MigrationErrorCode.MISSING_FIELDS: "Email and password are required",
    MigrationErrorCode.MISSING_EMAIL: "Email is required",
    MigrationErrorCode.USER_NOT_FOUND: "User not found",
    MigrationErrorCode.INVALID_PASSWORD: "Invalid password",
    MigrationErrorCode.ACCOUNT_DISABLED: "Account is deactivated",
    MigrationErrorCode.MIGRATION_DISABLED: "Legacy migration is not enabled",
    MigrationErrorCode.RATE_LIMITED: "Too many requests, please try again later",
    MigrationErrorCode.INTERNAL_ERROR: "Internal server error during migration",
}


def http_status_for(code: MigrationErrorCode) -> int:
    return HTTP_STATUS_BY_CODE.get(code, 500)


__all__ = [
    "MigrationErrorCode",
    "HTTP_STATUS_BY_CODE",
    "ERROR_MESSAGES",
    "http_status_for",
]

# Fin del archivo backend/app/modules/auth/enums/migration_error_code_enum.py
