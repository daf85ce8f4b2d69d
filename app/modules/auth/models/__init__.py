# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/models/__init__.py

Modelos ORM del módulo de autenticación.

IMPORTANTE: ModernAccount/ModernSession tienen FK hacia auth_users; se
importan en el mismo módulo que ModernUser para que las relationships se
resuelvan al configurar los mappers.

Autor: Ixchel Beristáin
Fecha: 18/10/2025
"""

from .legacy_user_models import LegacyUser
from .modern_user_models import (
    ModernUser,
    ModernAccount,
    ModernSession,
    PASSWORD_PROVIDER,
)

__all__ = [
    "LegacyUser",
    "ModernUser",
    "ModernAccount",
    "ModernSession",
    "PASSWORD_PROVIDER",
]
