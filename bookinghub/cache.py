"""In-process cache for read-mostly tenant queries.

Entries are keyed by query identity tuples such as ``('catalog', 7)`` and
expire after a TTL. Writers do not touch the cache directly: the storage
gateway collects the keys a mutation makes stale and calls
``invalidate`` once the transaction has committed.
"""
import threading
import time


class QueryCache:
    """Thread-safe TTL cache keyed by tuples"""

    def __init__(self, ttl=300, max_size=512):
        self.ttl = ttl
        self.max_size = max_size
        self._entries = {}
        self._lock = threading.Lock()

    def init_app(self, app):
        self.ttl = app.config.get('QUERY_CACHE_TTL', self.ttl)
        self.max_size = app.config.get('QUERY_CACHE_MAX_SIZE', self.max_size)
        app.extensions['query_cache'] = self
        self.clear()

    def _is_expired(self, stored_at):
        return time.monotonic() - stored_at > self.ttl

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._is_expired(stored_at):
                del self._entries[key]
                return None
            return value

    def set(self, key, value):
        with self._lock:
            if len(self._entries) >= self.max_size and key not in self._entries:
                self._evict()
            self._entries[key] = (value, time.monotonic())

    def get_or_load(self, key, loader):
        """Return the cached value for key, calling loader() on a miss"""
        value = self.get(key)
        if value is None:
            value = loader()
            if value is not None:
                self.set(key, value)
        return value

    def invalidate(self, *keys):
        """Drop the given keys and every key they prefix"""
        with self._lock:
            for key in keys:
                stale = [k for k in self._entries if k[:len(key)] == key]
                for k in stale:
                    del self._entries[k]

    def clear(self):
        with self._lock:
            self._entries.clear()

    def _evict(self):
        # Expired entries first, then the oldest
        now = time.monotonic()
        expired = [k for k, (_, ts) in self._entries.items() if now - ts > self.ttl]
        for k in expired:
            del self._entries[k]
        if len(self._entries) >= self.max_size:
            oldest = min(self._entries, key=lambda k: self._entries[k][1])
            del self._entries[oldest]

    def __len__(self):
        return len(self._entries)
