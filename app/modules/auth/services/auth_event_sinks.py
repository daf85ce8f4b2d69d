# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/auth_event_sinks.py

Suscriptores del AuthEventLogger.

- LogSink: cualquier objeto con métodos info/warning/error (un
  logging.Logger sirve tal cual). LoggerSink es la implementación por
  defecto y enruta cada nivel a su logger dedicado:
    info     -> app.auth.events
    warn     -> app.auth.events.warning
    error    -> app.auth.events.error
    security -> app.auth.events.error
- MetricsSink: publica el evento en el AuthMetricsStore.

Autor: Ixchel Beristain
Fecha: 02/11/2025
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from app.modules.auth.enums import AuthEvent, AuthLogLevel
from app.modules.auth.metrics.store.auth_metrics_store import AuthMetricsStore
from app.shared.config.logging_config import AUTH_EVENTS_LOGGER


@dataclass(frozen=True)
class AuthEventRecord:
    """Evento ya clasificado, antes de sanitizar/serializar."""
    event: AuthEvent
    level: AuthLogLevel
    attributes: Dict[str, Any] = field(default_factory=dict)
    provider: Optional[str] = None
    duration_seconds: Optional[float] = None


class LogSink(Protocol):
    def info(self, msg: str) -> None: ...

    def warning(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...


class LoggerSink:
    """Sink por defecto basado en logging (un logger por nivel)."""

    def __init__(
        self,
        info_logger: Optional[logging.Logger] = None,
        warning_logger: Optional[logging.Logger] = None,
        error_logger: Optional[logging.Logger] = None,
    ) -> None:
        self._info = info_logger or logging.getLogger(AUTH_EVENTS_LOGGER)
        self._warning = warning_logger or logging.getLogger(f"{AUTH_EVENTS_LOGGER}.warning")
        self._error = error_logger or logging.getLogger(f"{AUTH_EVENTS_LOGGER}.error")

    def info(self, msg: str) -> None:
        self._info.info(msg)

    def warning(self, msg: str) -> None:
        self._warning.warning(msg)

    def error(self, msg: str) -> None:
        self._error.error(msg)


def write_to_sink(sink: LogSink, level: AuthLogLevel, line: str) -> None:
    """Enrutamiento por nivel: error y security comparten el sink de error."""
    if level in (AuthLogLevel.error, AuthLogLevel.security):
        sink.error(line)
    elif level == AuthLogLevel.warn:
        sink.warning(line)
    else:
        sink.info(line)


class MetricsSink:
    """Suscriptor de métricas: traduce el registro a AuthMetricsStore.track."""

    def __init__(self, store: AuthMetricsStore) -> None:
        self._store = store

    @property
    def store(self) -> AuthMetricsStore:
        return self._store

    def accepts(self, record: AuthEventRecord) -> bool:
        return self._store.is_trackable(record.event, record.provider)

    def publish(self, record: AuthEventRecord) -> None:
        self._store.track(
            record.event,
            provider=record.provider,
            duration_seconds=record.duration_seconds,
        )


__all__ = [
    "AuthEventRecord",
    "LogSink",
    "LoggerSink",
    "MetricsSink",
    "write_to_sink",
]

# Fin del archivo backend/app/modules/auth/services/auth_event_sinks.py
