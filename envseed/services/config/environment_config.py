from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class EnvironmentConfig:
    """Environment-specific URLs the platform calls back into.

    `middleware_base_url` receives checkout integration events and message sender
    callbacks. `local_middleware_url` is the development tunnel the LOCAL checkout
    event points at.
    """

    middleware_base_url: str
    _DEFAULT_LOCAL_MIDDLEWARE_URL: ClassVar[str] = "https://marketplaceteam.ngrok.io"
    local_middleware_url: str = _DEFAULT_LOCAL_MIDDLEWARE_URL

    @staticmethod
    def from_env() -> "EnvironmentConfig":
        local_url = (os.getenv("LOCAL_MIDDLEWARE_URL") or "").strip()
        return EnvironmentConfig(
            middleware_base_url=(os.getenv("MIDDLEWARE_BASE_URL") or "").strip().rstrip("/"),
            local_middleware_url=local_url.rstrip("/") or EnvironmentConfig._DEFAULT_LOCAL_MIDDLEWARE_URL,
        )
