"""
Модуль: `utils/rate_limit.py`.
Назначение: Ограничение частоты попыток входа и загрузок (скользящее окно в памяти процесса).
"""

import time
from collections import defaultdict, deque
from threading import Lock

from flask import current_app, request


class InMemoryRateLimiter:
    """Простой in-memory rate limiter (sliding window)."""

    def __init__(self, clock=time.monotonic, sweep_interval: float = 60.0):
        self._events = defaultdict(deque)
        self._lock = Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._longest_window = 0
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        """Удаляет ключи, все события которых вышли за самое длинное окно."""
        cutoff = now - self._longest_window
        stale = [key for key, events in self._events.items() if not events or events[-1] <= cutoff]
        for key in stale:
            del self._events[key]
        self._last_sweep = now

    def is_allowed(self, key: str, limit: int, window_seconds: int) -> bool:
        if limit <= 0 or window_seconds <= 0:
            return False

        now = self._clock()
        cutoff = now - window_seconds

        with self._lock:
            self._longest_window = max(self._longest_window, window_seconds)
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            events = self._events[key]
            while events and events[0] <= cutoff:
                events.popleft()

            if len(events) >= limit:
                return False

            events.append(now)
            return True

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._events)


def get_client_identifier() -> str:
    """IP клиента. За прокси его подставляет ProxyFix (см. TRUSTED_PROXY_COUNT)."""
    return request.remote_addr or "unknown"


def is_rate_limited(bucket: str, limit: int, window_seconds: int, identity: str | None = None) -> bool:
    """Учитывает запрос в корзине `bucket` и сообщает, превышен ли лимит."""
    limiter = current_app.extensions.get("rate_limiter")
    if limiter is None:
        return False

    rate_identity = identity or get_client_identifier()
    rate_key = f"{bucket}:{rate_identity}"
    limited = not limiter.is_allowed(rate_key, limit, window_seconds)
    if limited:
        current_app.logger.warning("Превышен лимит запросов %s для %s", bucket, rate_identity)
    return limited
