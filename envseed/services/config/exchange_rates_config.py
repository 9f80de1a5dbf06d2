from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass(frozen=True)
class ExchangeRatesConfig:
    """Where currency rates are fetched from and which base currencies are stored."""

    _DEFAULT_API_URL: ClassVar[str] = "https://open.er-api.com/v6/latest"
    _DEFAULT_CURRENCIES: ClassVar[tuple[str, ...]] = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY", "MXN")
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0

    api_url: str = _DEFAULT_API_URL
    currencies: tuple[str, ...] = field(default=_DEFAULT_CURRENCIES)
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def from_env() -> "ExchangeRatesConfig":
        api_url = (os.getenv("EXCHANGE_RATES_API_URL") or "").strip().rstrip("/")

        currencies_raw = os.getenv("EXCHANGE_RATES_CURRENCIES") or ""
        currencies = tuple(c.strip().upper() for c in currencies_raw.split(",") if c.strip())

        timeout_raw = os.getenv("EXCHANGE_RATES_TIMEOUT_SECONDS")
        timeout_seconds = ExchangeRatesConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError("Invalid EXCHANGE_RATES_TIMEOUT_SECONDS; must be a number") from exc

        return ExchangeRatesConfig(
            api_url=api_url or ExchangeRatesConfig._DEFAULT_API_URL,
            currencies=currencies or ExchangeRatesConfig._DEFAULT_CURRENCIES,
            timeout_seconds=timeout_seconds,
        )
