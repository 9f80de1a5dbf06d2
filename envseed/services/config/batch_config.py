from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BatchRunnerConfig:
    """Fan-out limits for bulk calls against the platform.

    The ceiling reflects the platform's rate limits, not the host machine, so it is
    configured per deployment rather than derived from CPU count.
    """

    max_concurrency: int = 20
    batch_size: int = 20
    min_pause_seconds: float = 0.5

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.min_pause_seconds < 0:
            raise ValueError("min_pause_seconds must not be negative")

    @staticmethod
    def _int_from_env(name: str, default: int) -> int:
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid {name}; must be an integer") from exc

    @staticmethod
    def from_env() -> "BatchRunnerConfig":
        pause_raw = os.getenv("BATCH_MIN_PAUSE_SECONDS")
        min_pause_seconds = 0.5
        if pause_raw:
            try:
                min_pause_seconds = float(pause_raw)
            except ValueError as exc:
                raise ValueError("Invalid BATCH_MIN_PAUSE_SECONDS; must be a number") from exc

        return BatchRunnerConfig(
            max_concurrency=BatchRunnerConfig._int_from_env("BATCH_MAX_CONCURRENCY", 20),
            batch_size=BatchRunnerConfig._int_from_env("BATCH_SIZE", 20),
            min_pause_seconds=min_pause_seconds,
        )
