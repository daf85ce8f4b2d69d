# -*- coding: utf-8 -*-
"""
backend/app/shared/security/__init__.py

Security utilities for Campus Auth.
"""

from .rate_limit_service import RateLimitService, RateLimitResult

__all__ = [
    "RateLimitService",
    "RateLimitResult",
]
