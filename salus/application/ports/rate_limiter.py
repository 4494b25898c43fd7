from typing import Protocol


def rate_limit_key(scope: str, *parts: str) -> str:
    """``login:USER:a@b.com``, ``resend:<uuidToken>``"""
    return ":".join((scope,) + parts)


class RateLimiter(Protocol):
    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record one hit for ``key``; False once the window already holds ``max_requests``."""
        ...
