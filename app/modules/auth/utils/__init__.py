# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/utils/__init__.py

Utilidades del módulo Auth.
"""

from .log_sanitizer import (
    SENSITIVE_KEYS,
    normalize_email,
    mask_email,
    sanitize,
)

__all__ = [
    "SENSITIVE_KEYS",
    "normalize_email",
    "mask_email",
    "sanitize",
]
