from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from envseed.services.batch_runner import BatchOperationError, BatchRunner
from envseed.services.config import BatchRunnerConfig, ExchangeRatesConfig
from envseed.services.exchange_rates_service import ExchangeRatesService, ExchangeRatesServiceError

from tests.fake_http import FakeResponse, FakeSession


@pytest.fixture
def storage() -> MagicMock:
    storage = MagicMock()
    storage.bucket_name = "currency"
    storage.save_text = AsyncMock(side_effect=lambda **kwargs: kwargs["key"])
    return storage


def _service(session: FakeSession, storage: MagicMock, currencies=("USD", "EUR")) -> ExchangeRatesService:
    return ExchangeRatesService(
        ExchangeRatesConfig(api_url="https://rates.example.test/latest", currencies=currencies),
        session=session,
        storage=storage,
        runner=BatchRunner(BatchRunnerConfig(max_concurrency=1, batch_size=10, min_pause_seconds=0)),
    )


async def test_fetch_rates_parses_rates():
    session = FakeSession(FakeResponse(200, {"result": "success", "rates": {"USD": 1, "EUR": 0.92}}))

    rates = await _service(session, MagicMock()).fetch_rates("USD")

    assert rates == {"USD": 1.0, "EUR": 0.92}
    assert session.last("url") == "https://rates.example.test/latest/USD"


async def test_fetch_rates_non_ok_raises():
    session = FakeSession(FakeResponse(503))

    with pytest.raises(ExchangeRatesServiceError, match="503"):
        await _service(session, MagicMock()).fetch_rates("USD")


async def test_fetch_rates_without_rates_raises():
    session = FakeSession(FakeResponse(200, {"result": "error"}))

    with pytest.raises(ExchangeRatesServiceError):
        await _service(session, MagicMock()).fetch_rates("EUR")


async def test_update_writes_one_file_per_currency(storage):
    session = FakeSession(
        FakeResponse(200, {"rates": {"USD": 1, "EUR": 0.9, "JPY": 150.0}}),
        FakeResponse(200, {"rates": {"USD": 1.1, "EUR": 1, "JPY": 165.0}}),
    )

    keys = await _service(session, storage).update()

    assert keys == ["USD.json", "EUR.json"]
    first = json.loads(storage.save_text.await_args_list[0].kwargs["content"])
    assert first["BaseCurrency"] == "USD"
    assert first["Rates"] == [{"Currency": "EUR", "Rate": 0.9}, {"Currency": "USD", "Rate": 1.0}]
    assert "UpdatedAt" in first


async def test_update_reports_failed_currencies(storage):
    session = FakeSession(FakeResponse(200, {"rates": {"USD": 1, "EUR": 0.9}}), FakeResponse(500))

    with pytest.raises(BatchOperationError) as excinfo:
        await _service(session, storage).update()

    assert [item for item, _ in excinfo.value.failures] == ["EUR"]
    assert storage.save_text.await_count == 1
