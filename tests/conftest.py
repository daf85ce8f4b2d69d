# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests de Campus Auth.

- Fija PYTHON_ENV=test ANTES de importar la app (settings cacheados)
- Limpia el caché de settings y el contenedor de Auth entre tests
- Flags de autenticación apagadas por defecto; cada test las enciende
  de forma explícita
"""

import os

os.environ["PYTHON_ENV"] = "test"
os.environ.setdefault("ENABLE_LEGACY_MIGRATION", "false")
os.environ.setdefault("ENABLE_MODERN_AUTH", "false")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")

import pytest

from app.shared.config.config_loader import get_settings


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Cada test arranca con settings y contenedor frescos."""
    from app.modules.auth.dependencies import set_auth_container

    get_settings.cache_clear()
    set_auth_container(None)
    yield
    set_auth_container(None)
    get_settings.cache_clear()

# Fin del archivo backend/tests/conftest.py
