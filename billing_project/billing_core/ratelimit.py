"""
Attempt counters for the login and register endpoints.

Counts live in Django's cache, one key per scope, client address and fixed
time window, so every process sharing the cache shares the limit.
"""
import logging
import time
from functools import wraps

from django.conf import settings
from django.core.cache import cache

from .exceptions import RateLimited

logger = logging.getLogger(__name__)


def hit(scope, client, limit, window):
    """Count one attempt; True while `client` is within `limit` per window."""
    bucket = int(time.time() // window)
    key = f"ratelimit:{scope}:{client}:{bucket}"
    cache.add(key, 0, timeout=window)
    try:
        count = cache.incr(key)
    except ValueError:
        # the key expired between add() and incr()
        cache.set(key, 1, timeout=window)
        count = 1
    return count <= limit


def rate_limited(scope):
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            conf = settings.BILLING_AUTH_RATE_LIMIT
            client = request.META.get("REMOTE_ADDR") or "unknown"
            if conf["ENABLED"] and not hit(
                    scope, client, conf["ATTEMPTS"], conf["WINDOW_SECONDS"]):
                logger.warning("%s attempts from %s over the limit", scope, client)
                raise RateLimited("Too many attempts, please try again later")
            return view(request, *args, **kwargs)

        return wrapper

    return decorator
