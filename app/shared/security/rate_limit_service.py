# -*- coding: utf-8 -*-
"""
backend/app/shared/security/rate_limit_service.py

Rate limiting en memoria con ventana deslizante.

Cada llave (endpoint + tipo + identificador) guarda los instantes
(reloj monotónico) de sus solicitudes dentro de la ventana. Una solicitud
se admite si, tras descartar los instantes vencidos, hay menos de `limit`.

Un solo proceso: la instancia la crea la raíz de composición.

Author: Ixchel Beristain
Updated: 2025-12-18
"""
from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional

logger = logging.getLogger(__name__)

# Por encima de este número de llaves se purgan las vacías
_CLEANUP_THRESHOLD = 10000


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    remaining: int
    retry_after: int  # seconds until a slot frees up
    current_count: int
    limit: int


class RateLimitService:
    """
    Key naming convention:
    - rl:auth:migrate-login:ip:{ip}
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        default_limit: int = 20,
        default_window_sec: int = 300,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._enabled = enabled
        self._default_limit = default_limit
        self._default_window = default_window_sec
        self._clock = clock or time.monotonic
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @staticmethod
    def build_key(endpoint: str, key_type: str, identifier: Optional[str]) -> str:
        normalized = identifier.lower().strip() if identifier else "unknown"
        return f"rl:{endpoint}:{key_type}:{normalized}"

    def check_and_consume(
        self,
        endpoint: str,
        key_type: str,
        identifier: Optional[str],
        limit: Optional[int] = None,
        window_sec: Optional[int] = None,
    ) -> RateLimitResult:
        """
        Check rate limit and consume one slot if allowed.
        Rejected requests do not consume a slot.
        """
        actual_limit = limit if limit is not None else self._default_limit
        actual_window = window_sec if window_sec is not None else self._default_window

        if not self._enabled:
            return RateLimitResult(
                allowed=True,
                remaining=actual_limit,
                retry_after=0,
                current_count=0,
                limit=actual_limit,
            )

        key = self.build_key(endpoint, key_type, identifier)
        now = self._clock()

        with self._lock:
            if len(self._hits) > _CLEANUP_THRESHOLD:
                self._cleanup_expired(now, actual_window)

            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= actual_window:
                hits.popleft()

            if len(hits) >= actual_limit:
                retry_after = math.ceil(actual_window - (now - hits[0])) if hits else actual_window
                logger.warning(
                    "Rate limit exceeded (in-memory): key=%s, count=%s, limit=%s",
                    key,
                    len(hits),
                    actual_limit,
                )
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    retry_after=max(1, retry_after),
                    current_count=len(hits),
                    limit=actual_limit,
                )

            hits.append(now)
            return RateLimitResult(
                allowed=True,
                remaining=actual_limit - len(hits),
                retry_after=0,
                current_count=len(hits),
                limit=actual_limit,
            )

    def _cleanup_expired(self, now: float, window_sec: int) -> None:
        """Remove keys whose hits all fell out of the window (lock held)."""
        expired = [k for k, v in self._hits.items() if not v or now - v[-1] >= window_sec]
        for k in expired:
            del self._hits[k]
        if expired:
            logger.debug("Rate limiter cleaned up %s expired keys", len(expired))

    def reset_key(self, endpoint: str, key_type: str, identifier: Optional[str]) -> None:
        with self._lock:
            self._hits.pop(self.build_key(endpoint, key_type, identifier), None)


__all__ = ["RateLimitService", "RateLimitResult"]

# Fin del archivo backend/app/shared/security/rate_limit_service.py
