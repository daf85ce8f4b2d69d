# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend de Campus Auth.

Ajustes clave:
- Uso de app.core.settings como fachada de configuración.
- Logging vía dictConfig (texto o JSON) antes de montar rutas.
- Validación de feature flags de autenticación al arranque.
- Montaje de observabilidad Prometheus (/metrics) vía app.observability.prom
- Scheduler con el snapshot horario de métricas de autenticación
- Health principal /health delegado al paquete app.routes (health_routes.py)
- CORS desde CORS_ORIGINS

Autor: Ixchel Beristain
Fecha: 17/11/2025
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# Cargar .env ANTES de construir settings
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_PYTHON_ENV not in ("production", "prod"))

import anyio
import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.db import dispose_engine
from app.core.logging import setup_logging
from app.core.settings import get_settings
from app.modules.auth.dependencies import get_auth_container
from app.modules.auth.enums import MigrationErrorCode
from app.modules.auth.facades import failure_response
from app.modules.auth.routes.migration_routes import MIGRATE_LOGIN_PATH
from app.observability.prom import setup_observability
from app.shared.utils.json_response import UTF8JSONResponse, json_response_utf8

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    settings = get_settings()
    container = get_auth_container()

    # Flags inconsistentes se reportan, no detienen el arranque
    container.flags.log_validation()

    scheduler = None
    if settings.auth_metrics_snapshot_enabled:
        from app.shared.scheduler import get_scheduler
        from app.shared.scheduler.jobs import register_auth_metrics_snapshot_job

        scheduler = get_scheduler()
        register_auth_metrics_snapshot_job(scheduler, container)
        scheduler.start()
        logger.info("⏰ Scheduler iniciado con jobs programados")
    else:
        logger.info("⏰ Snapshot horario de métricas deshabilitado")

    logger.info("🟢 %s iniciado (env=%s).", settings.app_name, settings.python_env)
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        logger.info("🔴 Iniciando shutdown ordenado...")
        with anyio.CancelScope(shield=True):
            if scheduler is not None:
                scheduler.shutdown(wait=False)
                logger.info("⏰ Scheduler detenido")
            await dispose_engine()
        logger.info("🔴 %s apagado.", settings.app_name)


openapi_tags = [
    {"name": "auth-migration", "description": "Login con migración transparente de usuarios legacy"},
    {"name": "metrics-auth", "description": "Métricas de autenticación"},
    {"name": "health", "description": "Estado del servicio"},
]


def _parse_origins(raw: str) -> list[str]:
    return [o.strip().strip('"').strip("'") for o in (raw or "").split(",") if o.strip()]


def _configure_cors(app_instance: FastAPI, allowed_origins: str) -> dict:
    """
    Configura CORS middleware.

    "*" con allow_credentials=True es inválido en navegadores: en modo
    wildcard se desactivan credenciales.
    """
    origins_list = _parse_origins(allowed_origins)
    is_wildcard_only = origins_list == ["*"]
    if "*" in origins_list and not is_wildcard_only:
        logger.warning("⚠️ CORS: Filtrando '*' de origins porque hay otros origins explícitos.")
        origins_list = [o for o in origins_list if o != "*"]

    cors_config = {
        "allow_origins": origins_list,
        "allow_credentials": not is_wildcard_only,
        "allow_methods": ["*"] if is_wildcard_only else ["GET", "POST", "OPTIONS"],
        "allow_headers": ["*"],
        "expose_headers": ["Retry-After"],
        "max_age": 600,
    }
    if not origins_list:
        logger.error("🚫 CORS IS DISABLED - No origins will be allowed!")
        return {"cors_disabled": True, "allow_origins": []}

    app_instance.add_middleware(CORSMiddleware, **cors_config)
    logger.info("🌐 CORS habilitado para %s", origins_list)
    return cors_config


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(level=settings.log_level, fmt=settings.log_format)

    application = FastAPI(
        title=settings.app_name,
        description="API de autenticación con migración transparente de usuarios legacy",
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
        default_response_class=UTF8JSONResponse,
    )

    # El orden real de ejecución de middlewares en Starlette es inverso al registro:
    # CORS se registra al final para ejecutarse primero.
    setup_observability(application)
    _configure_cors(application, settings.allowed_origins)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return json_response_utf8(
            content={"detail": exc.detail},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # migrate-login reporta cuerpos inválidos con su propio contrato
        if request.url.path == MIGRATE_LOGIN_PATH:
            missing = failure_response(MigrationErrorCode.MISSING_FIELDS)
            return json_response_utf8(missing.body, status_code=missing.status_code)
        return json_response_utf8(
            content={"detail": jsonable_encoder(exc.errors())},
            status_code=422,
        )

    from app.routes import router as main_router
    application.include_router(main_router)

    @application.get("/")
    async def root():
        return {"service": settings.app_name, "status": "active"}

    return application


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=_settings.debug,
    )

# Fin del archivo backend/app/main.py
