# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/schemas/__init__.py

Schemas Pydantic del módulo de autenticación.

Autor: Ixchel Beristáin
Fecha: 18/10/2025
"""

from .migration_schemas import (
    # Requests
    MigrateLoginRequest,

    # Responses
    MigrateLoginResponse,
    MigratedUserOut,
    SessionOut,
    MigrationStatusResponse,
    FeatureFlagsResponse,
    FlagValidationOut,
    ErrorResponse,
    RESPONSES_WITH_ERRORS,
)

__all__ = [
    "MigrateLoginRequest",
    "MigrateLoginResponse",
    "MigratedUserOut",
    "SessionOut",
    "MigrationStatusResponse",
    "FeatureFlagsResponse",
    "FlagValidationOut",
    "ErrorResponse",
    "RESPONSES_WITH_ERRORS",
]

# Fin del archivo backend/app/modules/auth/schemas/__init__.py
