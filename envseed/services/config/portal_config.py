from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class PortalConfig:
    """Runtime configuration for the portal (developer identity) API."""

    base_url: str
    _DEFAULT_BASE_URL: ClassVar[str] = "https://portal.ordercloud.io/api/v1"
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def from_env() -> "PortalConfig":
        base_url = (os.getenv("PORTAL_API_URL") or "").strip() or PortalConfig._DEFAULT_BASE_URL

        timeout_raw = os.getenv("PORTAL_TIMEOUT_SECONDS")
        timeout_seconds = PortalConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError("Invalid PORTAL_TIMEOUT_SECONDS; must be a number") from exc

        return PortalConfig(base_url=base_url.rstrip("/"), timeout_seconds=timeout_seconds)
