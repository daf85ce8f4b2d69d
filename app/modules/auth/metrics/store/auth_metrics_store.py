# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/metrics/store/auth_metrics_store.py

Agregador en memoria de métricas de autenticación (un solo proceso).

Responsabilidades:
- Contadores monótonos por familia (login, registro, reset, verificación,
  2FA, OAuth por proveedor, sesiones, seguridad, migración legacy)
- Gauges de población (totalUsers, pendingLegacyMigrations)
- Tasas derivadas: numerador / (numerador + denominador), truncadas a dos
  decimales y expresadas en porcentaje; división entre cero -> "0.00"
- Anillo acotado de snapshots horarios (por defecto 168 = 7 días)

Concurrencia:
- Todas las mutaciones, snapshot() y timeseries() se serializan con un
  threading.RLock; las lecturas devuelven copias profundas.

El store no es un singleton de módulo: lo construye la raíz de composición
(AuthContainer) y se inyecta al logger y a la fachada.

Autor: Ixchel Beristain
Fecha: 2025-11-07
"""

from __future__ import annotations

import copy
import logging
import threading
from collections import deque
from datetime import datetime, timedelta, timezone
from decimal import ROUND_DOWN, Decimal
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Protocol, Tuple

from app.modules.auth.enums import (
    AuthEvent,
    OAUTH_EVENTS,
    OAuthProvider,
    SESSION_END_EVENTS,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMESERIES_CAPACITY = 168
TWO_PLACES = Decimal("0.01")
ZERO_RATE = "0.00"

POPULATION_GAUGES = ("totalUsers", "pendingLegacyMigrations")

Clock = Callable[[], datetime]


class MetricsMirror(Protocol):
    def on_event(
        self,
        event: str,
        provider: Optional[str] = None,
        duration_seconds: Optional[float] = None,
    ) -> None: ...

    def on_population(self, name: str, value: int) -> None: ...


# Evento -> (familia, celda). OAuth se resuelve aparte (familia por proveedor).
_EVENT_CELLS: Dict[AuthEvent, Tuple[str, str]] = {
    AuthEvent.login_success: ("login", "success"),
    AuthEvent.login_failure: ("login", "failure"),
    AuthEvent.registration_success: ("registration", "success"),
    AuthEvent.registration_failure: ("registration", "failure"),
    AuthEvent.password_reset_request: ("passwordReset", "requests"),
    AuthEvent.password_reset_success: ("passwordReset", "success"),
    AuthEvent.password_reset_failure: ("passwordReset", "failure"),
    AuthEvent.email_verification_sent: ("emailVerification", "sent"),
    AuthEvent.email_verification_success: ("emailVerification", "success"),
    AuthEvent.email_verification_failure: ("emailVerification", "failure"),
    AuthEvent.two_factor_enabled: ("twoFactor", "enabled"),
    AuthEvent.two_factor_disabled: ("twoFactor", "disabled"),
    AuthEvent.two_factor_verify_success: ("twoFactor", "verificationSuccess"),
    AuthEvent.two_factor_verify_failure: ("twoFactor", "verificationFailure"),
    AuthEvent.session_created: ("sessions", "created"),
    AuthEvent.session_invalidated: ("sessions", "invalidated"),
    AuthEvent.session_expired: ("sessions", "expired"),
    AuthEvent.rate_limit_exceeded: ("security", "rateLimitViolations"),
    AuthEvent.suspicious_activity: ("security", "suspiciousActivity"),
    AuthEvent.blocked_ip: ("security", "blockedIPs"),
    AuthEvent.legacy_migration_success: ("legacyMigration", "success"),
    AuthEvent.legacy_migration_failure: ("legacyMigration", "failure"),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """ISO-8601/RFC3339 en UTC con milisegundos y sufijo Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def truncate_2(value: Decimal) -> str:
    return str(value.quantize(TWO_PLACES, rounding=ROUND_DOWN))


def success_rate(numerator: int, other: int) -> str:
    """numerator / (numerator + other) * 100, truncado a 2 decimales."""
    total = numerator + other
    if total <= 0:
        return ZERO_RATE
    return truncate_2(Decimal(numerator) * 100 / Decimal(total))


def ratio_rate(numerator: int, denominator: int) -> str:
    """numerator / denominator * 100 acotado a [0, 100]."""
    if denominator <= 0:
        return ZERO_RATE
    value = Decimal(max(0, numerator)) * 100 / Decimal(denominator)
    return truncate_2(min(value, Decimal(100)))


def _oauth_rate_key(provider: str) -> str:
    return f"oauth{provider[:1].upper()}{provider[1:]}SuccessRate"


class AuthMetricsStore:
    """Contadores, tasas derivadas y serie temporal de autenticación."""

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_TIMESERIES_CAPACITY,
        clock: Optional[Clock] = None,
        oauth_providers: Iterable[str] = tuple(p.value for p in OAuthProvider),
        mirror: Optional[MetricsMirror] = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity debe ser > 0")
        self._capacity = capacity
        self._clock: Clock = clock or _utcnow
        self._providers: Tuple[str, ...] = tuple(oauth_providers)
        self._mirror = mirror
        self._lock = threading.RLock()
        self._timeseries: Deque[Tuple[datetime, Dict[str, Any]]] = deque(maxlen=capacity)
        self._counters: Dict[str, Dict[str, Any]] = {}
        self._population: Dict[str, int] = {}
        self._updated_at: datetime = self._clock()
        self._init_state()

    # ------------------------------------------------------------------
    # Estado interno
    # ------------------------------------------------------------------
    def _init_state(self) -> None:
        self._counters = {
            "login": {"success": 0, "failure": 0},
            "registration": {"success": 0, "failure": 0},
            "passwordReset": {"requests": 0, "success": 0, "failure": 0},
            "emailVerification": {"sent": 0, "success": 0, "failure": 0},
            "twoFactor": {
                "enabled": 0,
                "disabled": 0,
                "verificationSuccess": 0,
                "verificationFailure": 0,
            },
            "oauth": {p: {"success": 0, "failure": 0} for p in self._providers},
            "sessions": {"created": 0, "invalidated": 0, "expired": 0, "totalDuration": 0},
            "legacyMigration": {"success": 0, "failure": 0},
            "security": {"rateLimitViolations": 0, "suspiciousActivity": 0, "blockedIPs": 0},
        }
        self._population = {name: 0 for name in POPULATION_GAUGES}
        self._updated_at = self._clock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def oauth_providers(self) -> Tuple[str, ...]:
        return self._providers

    # ------------------------------------------------------------------
    # Validación
    # ------------------------------------------------------------------
    def is_trackable(self, event: AuthEvent | str, provider: Optional[str] = None) -> bool:
        """
        True si track(event, provider) incrementaría algún contador.
        OAuth exige un proveedor conocido.
        """
        try:
            kind = AuthEvent(event)
        except ValueError:
            return False
        if kind in OAUTH_EVENTS:
            return provider is not None and str(provider).lower() in self._providers
        return kind in _EVENT_CELLS

    # ------------------------------------------------------------------
    # Mutaciones
    # ------------------------------------------------------------------
    def track(
        self,
        event: AuthEvent | str,
        *,
        provider: Optional[str] = None,
        duration_seconds: Optional[float] = None,
    ) -> None:
        """
        Incrementa el contador del evento.

        Raises:
            ValueError: evento desconocido u OAuth sin proveedor válido.
        """
        if not self.is_trackable(event, provider):
            raise ValueError(f"Evento no rastreable: event={event!r} provider={provider!r}")

        kind = AuthEvent(event)
        duration: Optional[float] = None
        with self._lock:
            if kind in OAUTH_EVENTS:
                cell = "success" if kind == AuthEvent.oauth_success else "failure"
                provider = str(provider).lower()
                self._counters["oauth"][provider][cell] += 1
            else:
                family, cell = _EVENT_CELLS[kind]
                self._counters[family][cell] += 1

                if kind in SESSION_END_EVENTS and duration_seconds and duration_seconds > 0:
                    duration = duration_seconds
                    self._counters["sessions"]["totalDuration"] += duration_seconds

                if kind == AuthEvent.legacy_migration_success:
                    pending = self._population["pendingLegacyMigrations"]
                    if pending > 0:
                        self._population["pendingLegacyMigrations"] = pending - 1

            self._updated_at = self._clock()

            if self._mirror is not None:
                self._mirror.on_event(
                    kind.value,
                    provider=provider if kind in OAUTH_EVENTS else None,
                    duration_seconds=duration,
                )
                if kind == AuthEvent.legacy_migration_success:
                    self._mirror.on_population(
                        "pendingLegacyMigrations",
                        self._population["pendingLegacyMigrations"],
                    )

    def set_population_gauge(self, name: str, value: int) -> None:
        if name not in POPULATION_GAUGES:
            raise ValueError(f"Gauge desconocido: {name!r}")
        if value is None or int(value) < 0:
            raise ValueError(f"Valor inválido para {name}: {value!r}")
        with self._lock:
            self._population[name] = int(value)
            self._updated_at = self._clock()
            if self._mirror is not None:
                self._mirror.on_population(name, int(value))

    def reset(self) -> None:
        """Hook de pruebas: contadores a cero y serie temporal vacía."""
        with self._lock:
            self._init_state()
            self._timeseries.clear()

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------
    def counters(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._counters)

    def population(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._population)

    def derived(self) -> Dict[str, Any]:
        """Tasas derivadas (strings con 2 decimales) y sesiones activas."""
        with self._lock:
            return self._derived_unlocked()

    def _derived_unlocked(self) -> Dict[str, Any]:
        c = self._counters
        sessions = c["sessions"]
        ended = sessions["invalidated"] + sessions["expired"]
        if ended > 0:
            avg_hours = truncate_2(
                Decimal(str(sessions["totalDuration"])) / Decimal(ended) / Decimal(3600)
            )
        else:
            avg_hours = ZERO_RATE

        two_factor = c["twoFactor"]
        rates: Dict[str, Any] = {
            "loginSuccessRate": success_rate(c["login"]["success"], c["login"]["failure"]),
            "registrationSuccessRate": success_rate(
                c["registration"]["success"], c["registration"]["failure"]
            ),
            "passwordResetSuccessRate": success_rate(
                c["passwordReset"]["success"], c["passwordReset"]["failure"]
            ),
            "emailVerificationSuccessRate": success_rate(
                c["emailVerification"]["success"], c["emailVerification"]["failure"]
            ),
            "twoFactorAdoptionRate": ratio_rate(
                two_factor["enabled"] - two_factor["disabled"],
                self._population["totalUsers"],
            ),
            "twoFactorVerificationSuccessRate": success_rate(
                two_factor["verificationSuccess"], two_factor["verificationFailure"]
            ),
        }
        for provider in self._providers:
            cells = c["oauth"][provider]
            rates[_oauth_rate_key(provider)] = success_rate(cells["success"], cells["failure"])
        rates["legacyMigrationSuccessRate"] = success_rate(
            c["legacyMigration"]["success"], c["legacyMigration"]["failure"]
        )
        rates["averageSessionDurationHours"] = avg_hours
        rates["activeSessions"] = sessions["created"] - sessions["invalidated"] - sessions["expired"]
        return rates

    def snapshot(self) -> Dict[str, Any]:
        """Resumen por secciones (tasas con sufijo %)."""
        with self._lock:
            return self._summary_unlocked()

    def _summary_unlocked(self) -> Dict[str, Any]:
        c = copy.deepcopy(self._counters)
        d = self._derived_unlocked()
        pop = dict(self._population)
        return {
            "timestamp": to_rfc3339(self._updated_at),
            "authentication": {
                "loginSuccess": c["login"]["success"],
                "loginFailure": c["login"]["failure"],
                "loginSuccessRate": d["loginSuccessRate"] + "%",
            },
            "registration": {
                "success": c["registration"]["success"],
                "failure": c["registration"]["failure"],
                "successRate": d["registrationSuccessRate"] + "%",
            },
            "passwordReset": {
                "requests": c["passwordReset"]["requests"],
                "success": c["passwordReset"]["success"],
                "failure": c["passwordReset"]["failure"],
                "successRate": d["passwordResetSuccessRate"] + "%",
            },
            "emailVerification": {
                "sent": c["emailVerification"]["sent"],
                "success": c["emailVerification"]["success"],
                "failure": c["emailVerification"]["failure"],
                "successRate": d["emailVerificationSuccessRate"] + "%",
            },
            "twoFactor": {
                "enabled": c["twoFactor"]["enabled"],
                "disabled": c["twoFactor"]["disabled"],
                "adoptionRate": d["twoFactorAdoptionRate"] + "%",
                "verificationSuccess": c["twoFactor"]["verificationSuccess"],
                "verificationFailure": c["twoFactor"]["verificationFailure"],
                "verificationSuccessRate": d["twoFactorVerificationSuccessRate"] + "%",
            },
            "oauth": {
                provider: {
                    "success": c["oauth"][provider]["success"],
                    "failure": c["oauth"][provider]["failure"],
                    "successRate": d[_oauth_rate_key(provider)] + "%",
                }
                for provider in self._providers
            },
            "sessions": {
                "created": c["sessions"]["created"],
                "active": d["activeSessions"],
                "invalidated": c["sessions"]["invalidated"],
                "expired": c["sessions"]["expired"],
                "averageDurationHours": d["averageSessionDurationHours"],
            },
            "legacyMigration": {
                "pending": pop["pendingLegacyMigrations"],
                "success": c["legacyMigration"]["success"],
                "failure": c["legacyMigration"]["failure"],
                "successRate": d["legacyMigrationSuccessRate"] + "%",
            },
            "security": dict(c["security"]),
            "population": pop,
        }

    def detailed(self) -> Dict[str, Any]:
        """Contadores crudos + mapa de tasas derivadas."""
        with self._lock:
            return {
                "timestamp": to_rfc3339(self._updated_at),
                "counters": copy.deepcopy(self._counters),
                "population": dict(self._population),
                "rates": self._derived_unlocked(),
            }

    # ------------------------------------------------------------------
    # Serie temporal
    # ------------------------------------------------------------------
    def capture_snapshot(self) -> Dict[str, Any]:
        """
        Agrega el resumen actual al anillo; al exceder la capacidad se
        descarta el más antiguo (deque con maxlen).
        """
        with self._lock:
            captured_at = self._clock()
            point = self._summary_unlocked()
            point["timestamp"] = to_rfc3339(captured_at)
            point["updatedAt"] = to_rfc3339(self._updated_at)
            self._timeseries.append((captured_at, point))
            logger.debug(
                "[auth-metrics] snapshot capturado (%s/%s)",
                len(self._timeseries),
                self._capacity,
            )
            return copy.deepcopy(point)

    def timeseries(self, hours_back: float = 24) -> List[Dict[str, Any]]:
        """Snapshots capturados dentro de las últimas `hours_back` horas."""
        if hours_back is None or hours_back <= 0:
            return []
        with self._lock:
            cutoff = self._clock() - timedelta(hours=hours_back)
            return [copy.deepcopy(point) for ts, point in self._timeseries if ts > cutoff]

    def timeseries_length(self) -> int:
        with self._lock:
            return len(self._timeseries)


__all__ = [
    "AuthMetricsStore",
    "MetricsMirror",
    "DEFAULT_TIMESERIES_CAPACITY",
    "POPULATION_GAUGES",
    "success_rate",
    "ratio_rate",
    "to_rfc3339",
]

# Fin del archivo backend/app/modules/auth/metrics/store/auth_metrics_store.py
