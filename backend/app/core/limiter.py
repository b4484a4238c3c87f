"""
Shared rate limiter.

Routes decorate with `limiter.limit(...)` at import time; the limit string
is resolved per request so reloaded settings take effect.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.config import get_settings

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)


def current_rate_limit() -> str:
    """Rate limit string from the active settings."""
    return get_settings().rate_limit
