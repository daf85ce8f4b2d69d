# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/repositories/__init__.py

Punto de ensamblado de los repositorios del módulo Auth.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from .legacy_user_repository import LegacyUserRepository
from .modern_user_repository import ModernUserRepository

__all__ = [
    "LegacyUserRepository",
    "ModernUserRepository",
]

# Fin del archivo backend/app/modules/auth/repositories/__init__.py
