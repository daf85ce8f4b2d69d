# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/metrics/collectors/auth_collectors.py

Coleccionistas Prometheus del módulo Auth de Campus.

Espejo del AuthMetricsStore en memoria para scraping externo:
- campus_auth_events_total{event}: un incremento por evento rastreado
- campus_auth_oauth_events_total{provider,outcome}
- campus_auth_session_duration_seconds_total
- campus_auth_pending_legacy_migrations / campus_auth_total_users (gauges)

Autor: Ixchel Beristain
Fecha: 2025-11-07
"""
from __future__ import annotations

from typing import Optional

from prometheus_client import Counter, Gauge

NAMESPACE = "campus"
SUBSYSTEM = "auth"

auth_events_total = Counter(
    f"{NAMESPACE}_{SUBSYSTEM}_events_total",
    "Eventos de autenticación rastreados, por tipo",
    labelnames=("event",),
)

auth_oauth_events_total = Counter(
    f"{NAMESPACE}_{SUBSYSTEM}_oauth_events_total",
    "Eventos OAuth por proveedor y resultado",
    labelnames=("provider", "outcome"),  # success|failure
)

auth_session_duration_seconds_total = Counter(
    f"{NAMESPACE}_{SUBSYSTEM}_session_duration_seconds_total",
    "Duración acumulada de sesiones terminadas (segundos)",
)

auth_pending_legacy_migrations = Gauge(
    f"{NAMESPACE}_{SUBSYSTEM}_pending_legacy_migrations",
    "Usuarios legacy pendientes de migrar",
)

auth_total_users = Gauge(
    f"{NAMESPACE}_{SUBSYSTEM}_total_users",
    "Total de usuarios del almacén moderno",
)


class PrometheusAuthMirror:
    """
    Adaptador que el AuthMetricsStore invoca después de cada mutación.
    Mantiene el store desacoplado de prometheus_client.
    """

    def on_event(
        self,
        event: str,
        provider: Optional[str] = None,
        duration_seconds: Optional[float] = None,
    ) -> None:
        auth_events_total.labels(event=event).inc()
        if provider:
            outcome = "success" if event.endswith("_success") else "failure"
            auth_oauth_events_total.labels(provider=provider, outcome=outcome).inc()
        if duration_seconds:
            auth_session_duration_seconds_total.inc(duration_seconds)

    def on_population(self, name: str, value: int) -> None:
        if name == "pendingLegacyMigrations":
            auth_pending_legacy_migrations.set(value)
        elif name == "totalUsers":
            auth_total_users.set(value)


__all__ = [
    "NAMESPACE",
    "SUBSYSTEM",
    "auth_events_total",
    "auth_oauth_events_total",
    "auth_session_duration_seconds_total",
    "auth_pending_legacy_migrations",
    "auth_total_users",
    "PrometheusAuthMirror",
]

# Fin del archivo backend/app/modules/auth/metrics/collectors/auth_collectors.py
