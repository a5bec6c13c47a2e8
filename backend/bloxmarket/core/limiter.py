"""
Per-route rate limits (slowapi) for the endpoints that hand out tokens.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from bloxmarket.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)
