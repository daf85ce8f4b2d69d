# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/security_monitor.py

Monitor de eventos de seguridad por IP (ventana deslizante).

- Intentos fallidos de login: al llegar al umbral la IP se marca como
  sospechosa (un `suspicious_activity` por ventana); al llegar al doble
  del umbral se registra como bloqueada (`blocked_ip`).
- Violaciones de rate limit: cada una se registra como
  `rate_limit_exceeded`; al acumular `rate_limit_violation_threshold`
  en la ventana la IP también se marca como sospechosa.

Estado en memoria de un solo proceso; get_security_stats() alimenta
GET /auth/security/stats.

Autor: Ixchel Beristain
Fecha: 2025-12-18
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, Mapping, Optional

from app.modules.auth.metrics.store.auth_metrics_store import to_rfc3339
from app.modules.auth.services.auth_event_logger import AuthEventLogger

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"
CLEANUP_INTERVAL_SECONDS = 300


class SecurityMonitor:
    def __init__(
        self,
        event_logger: AuthEventLogger,
        *,
        failed_attempts_threshold: int = 5,
        window_seconds: int = 900,
        rate_limit_violation_threshold: int = 3,
        cleanup_interval_seconds: Optional[float] = None,
        monotonic: Optional[Callable[[], float]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if failed_attempts_threshold <= 0:
            raise ValueError("failed_attempts_threshold debe ser > 0")
        self._events = event_logger
        self._threshold = failed_attempts_threshold
        self._block_threshold = failed_attempts_threshold * 2
        self._rl_threshold = rate_limit_violation_threshold
        self._window = window_seconds
        self._cleanup_interval = (
            cleanup_interval_seconds
            if cleanup_interval_seconds is not None
            else min(CLEANUP_INTERVAL_SECONDS, window_seconds)
        )
        self._monotonic = monotonic or time.monotonic
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._failed: Dict[str, Deque[float]] = {}
        self._violations: Dict[str, Deque[float]] = {}
        self._suspicious: Dict[str, float] = {}  # ip -> instante de marcado
        self._blocked: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._last_cleanup = self._monotonic()

    # ------------------------------------------------------------------
    # Helpers internos (lock tomado)
    # ------------------------------------------------------------------
    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self._window:
            hits.popleft()

    def _prune_all(self, now: float) -> None:
        for store in (self._failed, self._violations):
            for ip in list(store):
                self._prune(store[ip], now)
                if not store[ip]:
                    del store[ip]
        for flags in (self._suspicious, self._blocked):
            for ip, flagged_at in list(flags.items()):
                if now - flagged_at >= self._window:
                    del flags[ip]
        self._last_cleanup = now

    def _maybe_cleanup(self, now: float) -> None:
        """Purga las IPs expiradas como mucho una vez por intervalo."""
        if now - self._last_cleanup >= self._cleanup_interval:
            self._prune_all(now)

    def _flag_suspicious(self, ip: str, now: float) -> bool:
        """Marca la IP; True si es un marcado nuevo en esta ventana."""
        flagged_at = self._suspicious.get(ip)
        if flagged_at is not None and now - flagged_at < self._window:
            return False
        self._suspicious[ip] = now
        return True

    @staticmethod
    def _ip_of(request: Optional[Mapping[str, Any]]) -> str:
        return (request or {}).get("ip_address") or UNKNOWN_IP

    # ------------------------------------------------------------------
    # Registro de eventos
    # ------------------------------------------------------------------
    def track_failed_login(
        self,
        email: Optional[str],
        request: Optional[Mapping[str, Any]] = None,
        reason: Optional[str] = None,
    ) -> int:
        """
        Registra un intento fallido para la IP del request.
        Devuelve el número de fallos de la IP dentro de la ventana.
        """
        ip = self._ip_of(request)
        now = self._monotonic()
        emit_suspicious = emit_blocked = False

        with self._lock:
            self._maybe_cleanup(now)
            hits = self._failed.setdefault(ip, deque())
            self._prune(hits, now)
            hits.append(now)
            count = len(hits)

            if count >= self._threshold:
                emit_suspicious = self._flag_suspicious(ip, now)
            if count >= self._block_threshold and ip not in self._blocked:
                self._blocked[ip] = now
                emit_blocked = True

        # Los eventos se emiten fuera del lock
        if emit_suspicious:
            self._events.log_suspicious_activity(
                f"Multiple failed login attempts detected ({count} attempts)",
                request,
                email=email,
                attempt_count=count,
                pattern="brute_force",
                reason=reason,
            )
        if emit_blocked:
            logger.warning("[security] IP bloqueada tras %s intentos fallidos", count)
            self._events.log_blocked_ip(
                ip,
                reason="failed_login_attempts",
                attempt_count=count,
            )
        return count

    def track_successful_login(self, request: Optional[Mapping[str, Any]] = None) -> None:
        """Un login exitoso limpia los fallos de la IP (no las marcas)."""
        ip = self._ip_of(request)
        with self._lock:
            self._failed.pop(ip, None)

    def track_rate_limit_violation(
        self,
        endpoint: str,
        request: Optional[Mapping[str, Any]] = None,
    ) -> int:
        ip = self._ip_of(request)
        now = self._monotonic()
        emit_suspicious = False

        with self._lock:
            self._maybe_cleanup(now)
            hits = self._violations.setdefault(ip, deque())
            self._prune(hits, now)
            hits.append(now)
            count = len(hits)
            if count >= self._rl_threshold:
                emit_suspicious = self._flag_suspicious(ip, now)

        self._events.log_rate_limit_exceeded(endpoint, request, violation_count=count)
        if emit_suspicious:
            self._events.log_suspicious_activity(
                f"Repeated rate limit violations detected ({count} violations)",
                request,
                endpoint=endpoint,
                violation_count=count,
                pattern="rate_limit_abuse",
            )
        return count

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    def is_suspicious(self, ip: str) -> bool:
        with self._lock:
            self._prune_all(self._monotonic())
            return ip in self._suspicious

    def is_blocked(self, ip: str) -> bool:
        with self._lock:
            self._prune_all(self._monotonic())
            return ip in self._blocked

    def failed_attempt_count(self, ip: str) -> int:
        with self._lock:
            hits = self._failed.get(ip)
            if not hits:
                return 0
            self._prune(hits, self._monotonic())
            return len(hits)

    def clear_ip(self, ip: str) -> None:
        """Limpia marcas de una IP (revisión manual)."""
        with self._lock:
            self._suspicious.pop(ip, None)
            self._blocked.pop(ip, None)
            self._failed.pop(ip, None)
            self._violations.pop(ip, None)

    def get_security_stats(self) -> Dict[str, Any]:
        with self._lock:
            self._prune_all(self._monotonic())
            return {
                "suspicious_ips": len(self._suspicious),
                "blocked_ips": len(self._blocked),
                "tracked_failed_attempts": len(self._failed),
                "tracked_rate_limit_violations": len(self._violations),
                "timestamp": to_rfc3339(self._clock()),
            }

    def reset(self) -> None:
        with self._lock:
            self._failed.clear()
            self._violations.clear()
            self._suspicious.clear()
            self._blocked.clear()


__all__ = ["SecurityMonitor"]

# Fin del archivo backend/app/modules/auth/services/security_monitor.py
