# -*- coding: utf-8 -*-
"""
backend/app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import settings

El objeto `settings` es un proxy perezoso: la instancia real se construye
con config_loader.get_settings() la primera vez que se lee un atributo,
lo que evita validaciones prematuras al importar módulos en tests.
"""

from __future__ import annotations

from typing import Any

from .config_loader import get_settings


class _SettingsProxy:
    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        return getattr(get_settings(), name)


# Singleton accesible como `settings` (lazy-load via getter)
settings = _SettingsProxy()

__all__ = ["settings", "get_settings"]
# Fin del archivo
