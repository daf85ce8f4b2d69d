# -*- coding: utf-8 -*-
"""
backend/app/shared/config/config_loader.py

Carga de configuración según PYTHON_ENV (development | test | production).

Acepta los alias habituales (dev, testing, prod). Ejecuta las validaciones
de seguridad de producción y cachea la instancia (singleton); los tests
limpian el caché con get_settings.cache_clear().

Autor: Ixchel Beristain
Actualizado: 17/11/2025
"""

import logging
import os
from functools import lru_cache
from typing import Dict, Type

from .settings_base import BaseAppSettings
from .settings_dev import DevSettings
from .settings_prod import ProdSettings
from .settings_testing import EnvTestingSettings

logger = logging.getLogger(__name__)

_ENV_ALIASES: Dict[str, str] = {
    "dev": "development",
    "development": "development",
    "test": "test",
    "testing": "test",
    "prod": "production",
    "production": "production",
}

_SETTINGS_BY_ENV: Dict[str, Type[BaseAppSettings]] = {
    "development": DevSettings,
    "test": EnvTestingSettings,
    "production": ProdSettings,
}


def resolve_env_name(raw: str | None) -> str:
    """Nombre canónico del entorno; valores desconocidos -> development."""
    return _ENV_ALIASES.get((raw or "").strip().lower(), "development")


@lru_cache(maxsize=1)
def get_settings() -> BaseAppSettings:
    """
    Devuelve la configuración del entorno actual.

    Raises:
        ValueError: si la configuración de producción no es segura
    """
    env = resolve_env_name(os.getenv("PYTHON_ENV"))
    settings = _SETTINGS_BY_ENV[env]()

    settings._security_checks()
    logger.debug("[config] settings cargados para env=%s", env)
    return settings


__all__ = ["get_settings", "resolve_env_name"]

# Fin del archivo backend/app/shared/config/config_loader.py
