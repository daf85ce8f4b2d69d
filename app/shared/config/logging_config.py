# -*- coding: utf-8 -*-
"""
backend/app/shared/config/logging_config.py

Configuración centralizada de logging para Campus Auth.
Soporta formato plain (desarrollo) y json (producción).

Los eventos de autenticación (AuthEventLogger) ya se emiten como una línea
JSON; sus loggers `app.auth.events*` usan un formatter que imprime el
mensaje tal cual para no envolver el JSON dos veces.

Autor: Ixchel Beristain
Fecha: 24/10/2025
"""

import logging.config
from typing import Literal


AUTH_EVENTS_LOGGER = "app.auth.events"


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain"
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Formato de salida (plain, pretty, json)

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("DEBUG", "pretty")
        >>> setup_logging("WARNING", "json")
    """
    # Normalización de formato (pretty == plain para efectos prácticos)
    use_json = fmt == "json"
    # Resolver ruta correcta del JsonFormatter (v4 movió jsonlogger -> json)
    try:
        import importlib
        importlib.import_module("pythonjsonlogger.json")
        json_formatter_path = "pythonjsonlogger.json.JsonFormatter"
    except Exception:  # pragma: no cover
        json_formatter_path = "pythonjsonlogger.jsonlogger.JsonFormatter"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if use_json else "default",
            "stream": "ext://sys.stdout",
        },
        "auth_events": {
            "class": "logging.StreamHandler",
            "formatter": "raw",
            "stream": "ext://sys.stdout",
        },
        "auth_events_error": {
            "class": "logging.StreamHandler",
            "formatter": "raw",
            "stream": "ext://sys.stderr",
        },
    }

    formatters = {
        "default": {
            "format": "%(levelname)s [%(name)s]: %(message)s"
        },
        "json": {
            "()": json_formatter_path,
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
        },
        "raw": {
            "format": "%(message)s"
        },
    }

    loggers = {
        AUTH_EVENTS_LOGGER: {
            "handlers": ["auth_events"],
            "level": "INFO",
            "propagate": False,
        },
        f"{AUTH_EVENTS_LOGGER}.error": {
            "handlers": ["auth_events_error"],
            "level": "INFO",
            "propagate": False,
        },
    }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers,
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(logging_config)


__all__ = ["setup_logging", "AUTH_EVENTS_LOGGER"]
# Fin del archivo backend/app/shared/config/logging_config.py
