"""
Thread-safe rate-limited logging.

A sponsor endpoint that is down fails every purchase the same way; this
keeps one warning per message per interval instead of one per purchase.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# Keys expire after the longest supported interval; the per-call interval is
# enforced by the cache that matches it.
_caches = {}
_caches_lock = threading.RLock()


def _cache_for(interval: int) -> TTLCache:
    with _caches_lock:
        if interval not in _caches:
            _caches[interval] = TTLCache(maxsize=100, ttl=interval)
        return _caches[interval]


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = 60,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message at most once per interval.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        interval: Minimum interval between identical logs in seconds
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was logged, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    cache = _cache_for(interval)
    with _caches_lock:
        if key in cache:
            return False
        cache[key] = True
    log_method(message)
    return True


def reset_rate_limits() -> None:
    """Forget every suppressed message"""
    with _caches_lock:
        for cache in _caches.values():
            cache.clear()
