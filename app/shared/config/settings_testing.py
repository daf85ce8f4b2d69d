# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado, base de datos aislada,
scheduler de snapshots apagado y rate limiting desactivado.

Autor: Ixchel Beristain
Fecha: 24/10/2025
"""

from .settings_base import BaseAppSettings
from pydantic_settings import SettingsConfigDict


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = "test"

    # --- Logging en test: menos ruido ---
    log_level: str = "WARNING"
    log_format: str = "pretty"

    # --- Base de datos: usar DB separada para pruebas ---
    db_name: str = "campus_test"

    # --- Sin jobs en background durante los tests ---
    auth_metrics_snapshot_enabled: bool = False
    rate_limit_enabled: bool = False
    session_cookie_secure: bool = False

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Fin del archivo backend/app/shared/config/settings_testing.py
