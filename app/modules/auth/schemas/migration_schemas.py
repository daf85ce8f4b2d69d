# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/schemas/migration_schemas.py

Schemas Pydantic de los endpoints de migración legacy.

Los campos de la petición son opcionales a propósito: la ausencia de
email/password se responde con MISSING_FIELDS (400) y no con un 422
de validación.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ========== REQUESTS ==========

class MigrateLoginRequest(BaseModel):
    """Petición de login con migración transparente"""
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None


# ========== RESPONSES ==========

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str


class MigratedUserOut(BaseModel):
    id: str
    legacyId: str
    email: str
    name: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    role: str
    chapter: Optional[str] = None
    emailVerified: bool = False
    isActive: bool = True


class SessionOut(BaseModel):
    id: str
    userId: str
    expiresAt: str


class MigrateLoginResponse(BaseModel):
    """Respuesta 200 de /auth/migrate-login (migrado o ya migrado)"""
    success: bool = True
    migrated: Optional[bool] = None
    alreadyMigrated: Optional[bool] = None
    message: str
    user: Optional[MigratedUserOut] = None
    session: Optional[SessionOut] = None
    redirectTo: Optional[str] = None
    requiresLogin: Optional[bool] = None
    requiresReauthentication: Optional[bool] = None


class MigrationStatusResponse(BaseModel):
    success: bool = True
    migrated: bool
    isLegacyUser: bool
    email: str


class FlagValidationOut(BaseModel):
    ok: bool
    warnings: List[str] = Field(default_factory=list)


class FeatureFlagsResponse(BaseModel):
    success: bool = True
    flags: Dict[str, bool]
    validation: FlagValidationOut


RESPONSES_WITH_ERRORS: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Campos requeridos ausentes"},
    401: {"model": ErrorResponse, "description": "Usuario no encontrado o password inválido"},
    403: {"model": ErrorResponse, "description": "Cuenta desactivada o migración deshabilitada"},
    429: {"model": ErrorResponse, "description": "Rate limit excedido"},
    500: {"model": ErrorResponse, "description": "Error interno"},
}


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

# Fin del archivo backend/app/modules/auth/schemas/migration_schemas.py
