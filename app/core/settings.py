# -*- coding: utf-8 -*-
"""
backend/app/core/settings.py

Fachada de configuración de Campus Auth.
Reexpone la carga de settings (Pydantic v2) de `app.shared.config`.

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from typing import cast

from app.shared.config.config_loader import get_settings as _get_settings
from app.shared.config.settings_base import BaseAppSettings


def get_settings() -> BaseAppSettings:
    """
    Devuelve la configuración global de la aplicación (según PYTHON_ENV).
    """
    return cast(BaseAppSettings, _get_settings())


__all__ = ["get_settings", "BaseAppSettings"]

# Fin del archivo backend/app/core/settings.py
