"""HTTP middleware - Presentation Layer."""

from .security import (
    InMemoryRateLimiter,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = ["InMemoryRateLimiter", "RateLimitMiddleware", "SecurityHeadersMiddleware"]
