# -*- coding: utf-8 -*-
"""
backend/app/core/logging.py

Fachada del módulo `app.shared.config.logging_config`.

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from typing import Literal

from app.shared.config.logging_config import setup_logging as _setup_logging


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
) -> None:
    """Configura logging raíz y los loggers de eventos de autenticación."""
    _setup_logging(level=level, fmt=fmt)

# Fin del archivo backend/app/core/logging.py
