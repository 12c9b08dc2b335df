"""
Ограничение частоты запросов к API по IP клиента.

У каждого клиента своё «ведро токенов». Таблица вёдер ограничена по
размеру: при переполнении вытесняется клиент, обращавшийся давнее всех.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict

from django.conf import settings

from .api import error_response

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "Превышено ограничение скорости запросов. Пожалуйста, повторите позже."
)


class TokenBucket:
    """Ведро на burst токенов, пополняется со скоростью rate в секунду."""

    def __init__(self, rate: float, burst: int, now: float):
        self.rate = rate
        self.burst = burst
        self.tokens = float(burst)
        self.updated_at = now

    def allow(self, now: float) -> bool:
        elapsed = max(0.0, now - self.updated_at)
        self.tokens = min(self.burst, self.tokens + elapsed * self.rate)
        self.updated_at = now
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False


class ClientRateLimiter:
    """Вёдра по ключу клиента в LRU-таблице ограниченного размера."""

    def __init__(
        self,
        rate: float,
        burst: int,
        max_clients: int = 10000,
        clock=time.monotonic,
    ):
        self.rate = rate
        self.burst = burst
        self.max_clients = max(1, max_clients)
        self._clock = clock
        self._buckets: OrderedDict[str, TokenBucket] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._buckets)

    def __contains__(self, key):
        return key in self._buckets

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(self.rate, self.burst, now)
                self._buckets[key] = bucket
                if len(self._buckets) > self.max_clients:
                    self._buckets.popitem(last=False)
            else:
                self._buckets.move_to_end(key)
            return bucket.allow(now)


def get_client_ip(request) -> str:
    if getattr(settings, "RATE_LIMIT_TRUST_FORWARDED", False):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        ip = forwarded.split(",")[0].strip()
        if ip:
            return ip
    return request.META.get("REMOTE_ADDR") or "unknown"


class RateLimitMiddleware:
    """Middleware: 429 для клиентов, превысивших лимит на /api/."""

    path_prefix = "/api/"

    def __init__(self, get_response):
        self.get_response = get_response
        self.limiter = ClientRateLimiter(
            rate=settings.API_RATE_LIMIT,
            burst=settings.API_RATE_BURST,
            max_clients=settings.RATE_LIMIT_MAX_CLIENTS,
        )

    def __call__(self, request):
        if request.path.startswith(self.path_prefix):
            client_ip = get_client_ip(request)
            if not self.limiter.allow(client_ip):
                logger.warning("Rate limit exceeded for IP %s", client_ip)
                return error_response(RATE_LIMIT_MESSAGE, status=429)
        return self.get_response(request)
