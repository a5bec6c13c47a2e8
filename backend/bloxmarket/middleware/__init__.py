"""Middleware package."""
from bloxmarket.middleware.rate_limit import RateLimitMiddleware
from bloxmarket.middleware.request_id import RequestIdMiddleware

__all__ = ["RateLimitMiddleware", "RequestIdMiddleware"]
