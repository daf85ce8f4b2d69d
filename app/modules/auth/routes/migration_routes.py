# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/routes/migration_routes.py

Rutas de migración transparente de usuarios legacy:
- POST /auth/migrate-login      login + migración en el primer acceso
- GET  /auth/migration-status   estado de migración de un email
- GET  /auth/feature-flags      flags efectivas + validación
- GET  /auth/security/stats     estadísticas del monitor de seguridad

Todas delegan en AuthFacade; las respuestas se construyen con
json_response_utf8 para respetar el status y la cookie de sesión.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

# Note: NOT using 'from __future__ import annotations' to ensure FastAPI
# can properly resolve Request type annotation for dependency injection

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from app.modules.auth.dependencies import get_auth_facade
from app.modules.auth.facades import AuthFacade, AuthFacadeResponse
from app.modules.auth.metrics.schemas.metrics_schemas import SecurityStatsResponse
from app.modules.auth.schemas import (
    FeatureFlagsResponse,
    MigrateLoginRequest,
    MigrateLoginResponse,
    MigrationStatusResponse,
    RESPONSES_WITH_ERRORS,
)
from app.shared.http_utils.request_meta import get_request_meta
from app.shared.utils.json_response import UTF8JSONResponse, json_response_utf8

router = APIRouter(prefix="/auth", tags=["auth-migration"])

MIGRATE_LOGIN_PATH = "/auth/migrate-login"


def _to_response(result: AuthFacadeResponse) -> UTF8JSONResponse:
    return json_response_utf8(
        result.body,
        status_code=result.status_code,
        set_cookie=result.set_cookie,
    )


@router.post(
    "/migrate-login",
    response_model=MigrateLoginResponse,
    responses=RESPONSES_WITH_ERRORS,
    summary="Login con migración transparente de usuario legacy",
)
async def migrate_login(
    request: Request,
    payload: Optional[MigrateLoginRequest] = Body(None),
    facade: AuthFacade = Depends(get_auth_facade),
):
    """
    Autentica contra el almacén legacy y, si el password es válido,
    crea la identidad moderna y emite la sesión en la misma respuesta.

    Flujo:
      1. Rate limiting por IP (429 RATE_LIMITED).
      2. Validación de campos (400 MISSING_FIELDS).
      3. Migración + sesión (ver AuthFacade.login_or_migrate).
    """
    meta = get_request_meta(request)

    limited = facade.check_migrate_login_rate_limit(meta)
    if limited is not None:
        retry_after = limited.body.get("retryAfter")
        headers = {"Retry-After": str(retry_after)} if retry_after else None
        return json_response_utf8(limited.body, status_code=limited.status_code, headers=headers)

    payload = payload or MigrateLoginRequest()
    result = await facade.login_or_migrate(payload.email, payload.password, meta)
    return _to_response(result)


@router.get(
    "/migration-status",
    response_model=MigrationStatusResponse,
    responses={400: RESPONSES_WITH_ERRORS[400], 500: RESPONSES_WITH_ERRORS[500]},
    summary="Estado de migración de un email",
)
async def migration_status(
    email: Optional[str] = Query(None),
    facade: AuthFacade = Depends(get_auth_facade),
):
    result = await facade.migration_status(email)
    return _to_response(result)


@router.get(
    "/feature-flags",
    response_model=FeatureFlagsResponse,
    summary="Feature flags de autenticación",
)
async def feature_flags(facade: AuthFacade = Depends(get_auth_facade)):
    return _to_response(facade.flags_status())


@router.get(
    "/security/stats",
    response_model=SecurityStatsResponse,
    summary="Estadísticas del monitor de seguridad",
)
async def security_stats(facade: AuthFacade = Depends(get_auth_facade)):
    return _to_response(facade.security_stats())


__all__ = ["router", "MIGRATE_LOGIN_PATH"]

# Fin del archivo backend/app/modules/auth/routes/migration_routes.py
