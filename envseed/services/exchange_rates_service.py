from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional

import aiohttp

from envseed.services.batch_runner import BatchRunner
from envseed.services.config import ExchangeRatesConfig
from envseed.services.s3_service import S3Service


logger = logging.getLogger(__name__)


class ExchangeRatesServiceError(RuntimeError):
    pass


class ExchangeRatesService:
    """Refreshes the currency-rate files the storefronts read from blob storage.

    One object per base currency is written as `<CODE>.json`, holding the rates from that
    currency to each of the other configured currencies.
    """

    def __init__(
        self,
        config: ExchangeRatesConfig,
        *,
        session: aiohttp.ClientSession,
        storage: S3Service,
        runner: Optional[BatchRunner] = None,
    ) -> None:
        self._config = config
        self._session = session
        self._storage = storage
        self._runner = runner or BatchRunner()

    async def fetch_rates(self, base_currency: str) -> dict[str, float]:
        url = f"{self._config.api_url}/{base_currency}"
        try:
            async with self._session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
            ) as resp:
                status = resp.status
                payload = await resp.read() or b""
        except Exception as exc:
            logger.exception("Exchange rate request failed (base=%s)", base_currency)
            raise ExchangeRatesServiceError(f"Failed fetching exchange rates for {base_currency}") from exc

        if status != HTTPStatus.OK:
            raise ExchangeRatesServiceError(f"Exchange rate provider returned HTTP {status} for {base_currency}")

        try:
            parsed: dict[str, Any] = json.loads(payload.decode("utf-8")) if payload else {}
        except Exception as exc:
            raise ExchangeRatesServiceError(f"Unreadable exchange rate response for {base_currency}") from exc

        rates = parsed.get("rates")
        if not isinstance(rates, dict) or not rates:
            raise ExchangeRatesServiceError(f"Exchange rate response for {base_currency} has no rates")
        return {str(code): float(rate) for code, rate in rates.items()}

    async def _update_one(self, base_currency: str) -> str:
        rates = await self.fetch_rates(base_currency)
        document = {
            "BaseCurrency": base_currency,
            "UpdatedAt": datetime.now(timezone.utc).isoformat(),
            "Rates": [
                {"Currency": code, "Rate": rate}
                for code, rate in sorted(rates.items())
                if code in self._config.currencies
            ],
        }
        return await self._storage.save_text(key=f"{base_currency}.json", content=json.dumps(document))

    async def update(self) -> list[str]:
        """Fetch and store rates for every configured base currency; returns written keys."""

        keys = await self._runner.run(self._config.currencies, self._update_one, desc="Updating exchange rates")
        logger.info("Exchange rates updated (bucket=%s, currencies=%d)", self._storage.bucket_name, len(keys))
        return keys
