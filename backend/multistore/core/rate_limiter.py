# backend/multistore/core/rate_limiter.py
"""
Rate limiting por IP de cliente.

Ventana fija en memoria: cada IP puede hacer RATE_LIMIT_REQUESTS peticiones
por cada RATE_LIMIT_PERIOD_SECONDS. Al superar el límite se responde 429 con
la envoltura ApiResponse y las cabeceras X-RateLimit-* / Retry-After.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette import status

from multistore.core.constants import AppConstants
from multistore.schemas.common_schema import ApiResponse

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int = 0


class RateLimiter:
    """Contador de peticiones por clave con ventana fija."""

    MAX_TRACKED_KEYS = 10000

    def __init__(self, limit: int, period_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.period_seconds = period_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}

    def hit(self, key: str) -> Tuple[bool, int, float]:
        """
        Registra una petición para `key`.

        Returns:
            (permitida, peticiones restantes, segundos hasta el reinicio de la ventana)
        """
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now >= window.started_at + self.period_seconds:
            if len(self._windows) >= self.MAX_TRACKED_KEYS:
                self.cleanup()
            window = _Window(started_at=now)
            self._windows[key] = window

        reset_in = max(0.0, window.started_at + self.period_seconds - now)
        if window.count >= self.limit:
            return False, 0, reset_in

        window.count += 1
        return True, max(0, self.limit - window.count), reset_in

    def cleanup(self) -> None:
        """Elimina ventanas caducadas hace más de un periodo."""
        cutoff = self._clock() - 2 * self.period_seconds
        self._windows = {k: w for k, w in self._windows.items() if w.started_at >= cutoff}

    def reset(self) -> None:
        self._windows.clear()


def get_client_ip(request: Request) -> str:
    """IP del cliente teniendo en cuenta proxies (X-Forwarded-For, X-Real-IP, Cloudflare)."""
    for header in ("x-forwarded-for", "x-real-ip", "cf-connecting-ip"):
        value: Optional[str] = request.headers.get(header)
        if value and value.lower() != "unknown":
            return value.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: RateLimiter, constants: AppConstants, enabled: bool = True):
        super().__init__(app)
        self.limiter = limiter
        self.constants = constants
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next):
        if not self.enabled:
            return await call_next(request)

        client_ip = get_client_ip(request)
        allowed, remaining, reset_in = self.limiter.hit(client_ip)
        reset_at = str(int((time.time() + reset_in) * 1000))
        headers = {
            self.constants.RATE_LIMIT_HEADER: str(self.limiter.limit),
            self.constants.RATE_LIMIT_REMAINING_HEADER: str(remaining),
            self.constants.RATE_LIMIT_RESET_HEADER: reset_at,
        }

        if not allowed:
            logger.warning(f"⚠️ RATE LIMIT: superado para {client_ip}")
            retry_after = int(reset_in) + 1
            headers["Retry-After"] = str(retry_after)
            body = ApiResponse.error(
                message="Rate limit exceeded",
                message_ar="تم تجاوز حد الطلبات المسموح",
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                errors={
                    "limit": self.limiter.limit,
                    "window_seconds": self.limiter.period_seconds,
                    "retry_after_seconds": retry_after,
                },
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=jsonable_encoder(body),
                headers=headers,
            )

        response = await call_next(request)
        for name, value in headers.items():
            response.headers[name] = value
        return response
