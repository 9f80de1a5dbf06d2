from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import aioboto3

from envseed.services.config import S3Config


logger = logging.getLogger(__name__)


class S3ServiceError(RuntimeError):
    pass


class S3Service:
    """Blob storage for published seed assets (translations, currency rates).

    Writes are plain overwrites, so publishing the same key twice is idempotent.
    """

    def __init__(self, config: S3Config, *, session: Optional[Any] = None) -> None:
        self._config = config
        self._session = session or aioboto3.Session()

    @property
    def bucket_name(self) -> str:
        return self._config.bucket_name

    def _client(self) -> Any:
        return self._session.client(
            "s3",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )

    async def _put(self, *, key: str, body: bytes, content_type: str) -> str:
        if not key:
            raise ValueError("'key' must be provided")

        s3_client: Any = self._client()
        async with s3_client as s3:
            await s3.put_object(Bucket=self._config.bucket_name, Key=key, Body=body, ContentType=content_type)
        return key

    async def save_text(self, *, key: str, content: str, content_type: str = "application/json") -> str:
        """Write `content` to `key`, replacing any existing object."""

        try:
            return await self._put(key=key, body=content.encode("utf-8"), content_type=content_type)
        except Exception as exc:
            logger.exception("S3 save_text failed (bucket=%s key=%s)", self._config.bucket_name, key)
            raise S3ServiceError(f"Failed to save object to S3 (key={key})") from exc

    async def upload_local_file(self, *, path: Path, key: str, content_type: str = "application/json") -> str:
        """Publish a bundled asset file under `key`, replacing any existing object."""

        try:
            if not path.is_file():
                raise FileNotFoundError(str(path))
            return await self._put(key=key, body=path.read_bytes(), content_type=content_type)
        except Exception as exc:
            logger.exception("S3 upload_local_file failed (bucket=%s key=%s)", self._config.bucket_name, key)
            raise S3ServiceError(f"Failed to upload local file to S3 (key={key})") from exc
