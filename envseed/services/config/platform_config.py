from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class PlatformConfig:
    """Runtime configuration for commerce platform API calls.

    `api_url` should be the API root without the version segment, e.g.
    "https://sandboxapi.ordercloud.io".

    The seed flow validates `api_url` and `webhook_hash_key` itself so that a missing
    value is reported before any remote call is made; `from_env` therefore accepts them
    empty.
    """

    api_url: str
    auth_url: str
    client_id: str
    client_secret: str
    webhook_hash_key: str
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def from_env() -> "PlatformConfig":
        api_url = (os.getenv("PLATFORM_API_URL") or "").strip().rstrip("/")
        auth_url = (os.getenv("PLATFORM_AUTH_URL") or "").strip().rstrip("/") or api_url

        timeout_raw = os.getenv("PLATFORM_TIMEOUT_SECONDS")
        timeout_seconds = PlatformConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError("Invalid PLATFORM_TIMEOUT_SECONDS; must be a number") from exc

        return PlatformConfig(
            api_url=api_url,
            auth_url=auth_url,
            client_id=(os.getenv("PLATFORM_CLIENT_ID") or "").strip(),
            client_secret=os.getenv("PLATFORM_CLIENT_SECRET") or "",
            webhook_hash_key=os.getenv("PLATFORM_WEBHOOK_HASH_KEY") or "",
            timeout_seconds=timeout_seconds,
        )
