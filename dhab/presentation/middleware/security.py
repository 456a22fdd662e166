"""Security middleware: response headers and per-IP rate limiting.

Both are pure ASGI middleware. The rate limiter state lives in an
InMemoryRateLimiter owned by the container, so the middleware itself holds
no counters.
"""

import json
import time
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger(__name__)


class SecurityHeadersMiddleware:
    """Set security and no-cache headers on every HTTP response."""

    _HEADERS: List[Tuple[str, str]] = [
        ("x-content-type-options", "nosniff"),
        ("x-frame-options", "DENY"),
        ("x-xss-protection", "1; mode=block"),
        ("referrer-policy", "strict-origin-when-cross-origin"),
        ("permissions-policy", "camera=(), microphone=(), geolocation=()"),
        ("cache-control", "no-store, max-age=0"),
    ]

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def _send(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self._HEADERS:
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, _send)


@dataclass
class _Window:
    count: int
    reset_at: float


class InMemoryRateLimiter:
    """Fixed-window request counter keyed by client."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
        max_keys: int = 10_000,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._max_keys = max_keys
        self._windows: Dict[str, _Window] = {}

    def hit(self, key: str) -> Tuple[bool, int]:
        """Count one request for ``key``. Returns ``(allowed, remaining)``."""
        now = self._clock()
        window = self._windows.get(key)

        if window is None or now > window.reset_at:
            if len(self._windows) >= self._max_keys:
                self._purge(now)
            self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
            return True, self.max_requests - 1

        if window.count >= self.max_requests:
            return False, 0

        window.count += 1
        return True, self.max_requests - window.count

    def _purge(self, now: float) -> None:
        expired = [key for key, w in self._windows.items() if now > w.reset_at]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        self._windows.clear()


_SKIP_PATHS: FrozenSet[str] = frozenset(
    ["/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"]
)


class RateLimitMiddleware:
    """Reject clients exceeding the limiter's budget with 429."""

    def __init__(self, app: ASGIApp, limiter: InMemoryRateLimiter) -> None:
        self.app = app
        self.limiter = limiter

    @staticmethod
    def _client_ip(scope: Scope) -> str:
        raw_headers = dict(scope.get("headers", []))
        forwarded = raw_headers.get(b"x-forwarded-for", b"").decode()
        if forwarded:
            return forwarded.split(",")[0].strip()
        client = scope.get("client")
        return client[0] if client else "unknown"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in _SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        ip = self._client_ip(scope)
        allowed, remaining = self.limiter.hit(ip)
        if not allowed:
            logger.warning("rate_limit.exceeded", ip=ip, path=scope.get("path"))
            await self._send_429(send)
            return

        async def _send(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append("x-ratelimit-limit", str(self.limiter.max_requests))
                headers.append("x-ratelimit-remaining", str(remaining))
            await send(message)

        await self.app(scope, receive, _send)

    async def _send_429(self, send: Send) -> None:
        body = json.dumps({"detail": "Too many requests"}).encode()
        window = str(int(self.limiter.window_seconds)).encode()
        await send(
            {
                "type": "http.response.start",
                "status": 429,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode()),
                    (b"retry-after", window),
                    (b"x-ratelimit-limit", str(self.limiter.max_requests).encode()),
                    (b"x-ratelimit-remaining", b"0"),
                ],
            }
        )
        await send({"type": "http.response.body", "body": body, "more_body": False})
