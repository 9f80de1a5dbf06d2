from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from envseed.services.config import S3Config
from envseed.services.s3_service import S3Service, S3ServiceError


class _ClientContext:
    def __init__(self, client: MagicMock) -> None:
        self._client = client

    async def __aenter__(self) -> MagicMock:
        return self._client

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.put_object = AsyncMock(return_value={})
    return client


@pytest.fixture
def aioboto3_session(s3_client) -> MagicMock:
    session = MagicMock()
    session.client.side_effect = lambda *args, **kwargs: _ClientContext(s3_client)
    return session


@pytest.fixture
def s3(aioboto3_session) -> S3Service:
    config = S3Config(bucket_name="ngx-translate", region_name="us-east-1", endpoint_url="http://localhost:4566")
    return S3Service(config, session=aioboto3_session)


async def test_save_text_puts_utf8_body(s3, s3_client, aioboto3_session):
    key = await s3.save_text(key="USD.json", content='{"Rates": []}')

    assert key == "USD.json"
    s3_client.put_object.assert_awaited_once_with(
        Bucket="ngx-translate", Key="USD.json", Body=b'{"Rates": []}', ContentType="application/json"
    )
    aioboto3_session.client.assert_called_once_with(
        "s3", region_name="us-east-1", endpoint_url="http://localhost:4566"
    )


async def test_upload_local_file_publishes_json(s3, s3_client, tmp_path):
    path = tmp_path / "english-translations.json"
    path.write_text('{"HELLO": "Hello"}', encoding="utf-8")

    key = await s3.upload_local_file(path=path, key="i18n/en.json")

    assert key == "i18n/en.json"
    kwargs = s3_client.put_object.await_args.kwargs
    assert kwargs["Body"] == b'{"HELLO": "Hello"}'
    assert kwargs["ContentType"] == "application/json"


async def test_upload_missing_file_raises(s3, tmp_path):
    with pytest.raises(S3ServiceError) as excinfo:
        await s3.upload_local_file(path=tmp_path / "missing.json", key="i18n/en.json")

    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


async def test_save_text_requires_key(s3, s3_client):
    with pytest.raises(S3ServiceError):
        await s3.save_text(key="", content="{}")

    s3_client.put_object.assert_not_awaited()


async def test_put_object_failure_is_wrapped(s3, s3_client):
    s3_client.put_object.side_effect = RuntimeError("AccessDenied")

    with pytest.raises(S3ServiceError, match="USD.json"):
        await s3.save_text(key="USD.json", content="{}")


def test_bucket_name_exposes_config(s3):
    assert s3.bucket_name == "ngx-translate"
