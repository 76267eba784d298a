from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    pass


class UpstreamError(ServiceError):
    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        detail = f"HTTP {status_code}: {reason}" if status_code is not None else reason
        super().__init__(f"Upstream request failed for {url}: {detail}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamError):
    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(url, f"timeout after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds
