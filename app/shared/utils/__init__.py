# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Exportación de utilidades comunes consolidadas.

Autor: Ixchel Beristain
Fecha: 2025-10-18 (Consolidación modular)
"""

from .json_response import UTF8JSONResponse, json_response_utf8
from .security import (
    MAX_PASSWORD_LENGTH,
    PasswordHasher,
    PasswordTooLongError,
    generate_session_token,
    hash_token,
    legacy_hasher,
    modern_hasher,
)

__all__ = [
    # Respuestas JSON
    "UTF8JSONResponse",
    "json_response_utf8",

    # Hashing / tokens
    "MAX_PASSWORD_LENGTH",
    "PasswordHasher",
    "PasswordTooLongError",
    "generate_session_token",
    "hash_token",
    "legacy_hasher",
    "modern_hasher",
]

# Fin del archivo backend/app/shared/utils/__init__.py
