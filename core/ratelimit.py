# core/ratelimit.py
"""
Fixed-window request counting per client address.

The limiter does not own its storage: a backend keeps the counters. Use
InMemoryRateLimitBackend for a single process and CacheRateLimitBackend when
several processes must share the counts through a common cache (Redis,
Memcached). Counts are best effort and vanish with the backing store.
"""
import logging
import threading
import time

from django.conf import settings
from django.core.cache import caches
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class RateLimitBackend:
    """Storage for request counters"""

    def increment(self, key, window_seconds):
        """Count one request for key and return the count in the current window"""
        raise NotImplementedError


class InMemoryRateLimitBackend(RateLimitBackend):
    """Process-local counters guarded by a lock, pruned when they pile up"""

    def __init__(self, max_entries=10000, clock=time.monotonic):
        self.max_entries = max_entries
        self.clock = clock
        self._records = {}
        self._lock = threading.Lock()

    def increment(self, key, window_seconds):
        now = self.clock()
        with self._lock:
            record = self._records.get(key)
            if record is None or now >= record[1]:
                if len(self._records) >= self.max_entries:
                    self._prune(now)
                self._records[key] = [1, now + window_seconds]
                return 1

            record[0] += 1
            return record[0]

    def _prune(self, now):
        expired = [key for key, (_, reset_at) in self._records.items() if now >= reset_at]
        for key in expired:
            del self._records[key]

        # Still full: drop the windows closest to expiry
        overflow = len(self._records) - self.max_entries + 1
        if overflow > 0:
            oldest = sorted(self._records, key=lambda key: self._records[key][1])[:overflow]
            for key in oldest:
                del self._records[key]

    def __len__(self):
        return len(self._records)


class CacheRateLimitBackend(RateLimitBackend):
    """Counters kept in a Django cache so every worker sees the same numbers"""

    def __init__(self, cache_alias='default', key_prefix='ratelimit'):
        self.cache = caches[cache_alias]
        self.key_prefix = key_prefix

    def increment(self, key, window_seconds):
        cache_key = f'{self.key_prefix}:{key}'
        if self.cache.add(cache_key, 1, timeout=window_seconds):
            return 1
        try:
            return self.cache.incr(cache_key)
        except ValueError:
            # Window expired between add() and incr()
            self.cache.set(cache_key, 1, timeout=window_seconds)
            return 1


class RateLimiter:
    def __init__(self, backend, window_seconds=60, max_requests=100):
        self.backend = backend
        self.window_seconds = window_seconds
        self.max_requests = max_requests

    def allow(self, client_key):
        """Record a request from client_key; False once it exceeds the window budget"""
        return self.backend.increment(client_key, self.window_seconds) <= self.max_requests


def build_rate_limiter(config=None):
    """RateLimiter from the RATE_LIMIT setting, or None when rate limiting is disabled"""
    if config is None:
        config = getattr(settings, 'RATE_LIMIT', {})
    if not config.get('ENABLED', True):
        return None

    backend_class = import_string(config.get('BACKEND', 'core.ratelimit.InMemoryRateLimitBackend'))
    backend = backend_class(**config.get('BACKEND_OPTIONS', {}))
    return RateLimiter(
        backend,
        window_seconds=config.get('WINDOW_SECONDS', 60),
        max_requests=config.get('MAX_REQUESTS', 100),
    )
