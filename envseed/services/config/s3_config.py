from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class S3Config:
    bucket_name: str
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None

    @staticmethod
    def from_env_named(*, bucket_env: str, default_bucket: str) -> "S3Config":
        bucket_name = (os.getenv(bucket_env) or "").strip() or default_bucket

        region_name = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
        endpoint_url = os.getenv("S3_ENDPOINT_URL")

        return S3Config(bucket_name=bucket_name, region_name=region_name, endpoint_url=endpoint_url)

    @staticmethod
    def from_env_translations() -> "S3Config":
        """Load config for the bucket holding the UI translation bundles."""

        return S3Config.from_env_named(bucket_env="S3_TRANSLATIONS_BUCKET_NAME", default_bucket="ngx-translate")

    @staticmethod
    def from_env_exchange_rates() -> "S3Config":
        """Load config for the bucket holding the currency rate files."""

        return S3Config.from_env_named(bucket_env="S3_EXCHANGE_RATES_BUCKET_NAME", default_bucket="currency")
