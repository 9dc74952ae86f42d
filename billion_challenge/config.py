"""
Configuration settings for the Billion Challenge.

Uses Pydantic Settings to load environment variables for logging and benchmark
defaults (problem sizes, run counts, strategy tuning knobs and worker limits).
Values can also be provided through a local `.env` file.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Problem sizes
    benchmark_size: int = Field(100_000_000, ge=0, alias="BENCHMARK_SIZE")
    benchmark_full_size: int = Field(1_000_000_000, ge=0, alias="BENCHMARK_FULL_SIZE")

    # Measurement protocol
    warmup_runs: int = Field(3, ge=0, alias="BENCHMARK_WARMUP_RUNS")
    test_runs: int = Field(5, gt=0, alias="BENCHMARK_TEST_RUNS")
    warmup_size_cap: int = Field(1_000_000, ge=0, alias="BENCHMARK_WARMUP_SIZE_CAP")
    warmup_divisor: int = Field(100, gt=0, alias="BENCHMARK_WARMUP_DIVISOR")
    progress_interval: int = Field(50_000_000, gt=0, alias="BENCHMARK_PROGRESS_INTERVAL")
    cooldown_seconds: float = Field(1.0, ge=0, alias="BENCHMARK_COOLDOWN_SECONDS")
    dev_cooldown_seconds: float = Field(0.1, ge=0, alias="BENCHMARK_DEV_COOLDOWN_SECONDS")
    track_peak_memory: bool = Field(False, alias="BENCHMARK_TRACK_PEAK_MEMORY")

    # Strategy tuning
    batch_size: int = Field(10_000_000, gt=0, alias="BENCHMARK_BATCH_SIZE")
    vector_width: int = Field(8, gt=0, alias="BENCHMARK_VECTOR_WIDTH")
    cache_chunk_size: int = Field(16_000, gt=0, alias="BENCHMARK_CACHE_CHUNK_SIZE")
    max_recursive_size: int = Field(500, ge=0, alias="BENCHMARK_MAX_RECURSIVE_SIZE")

    # Parallel workers
    workers: Optional[int] = Field(None, gt=0, alias="BENCHMARK_WORKERS")
    worker_timeout_seconds: float = Field(300.0, gt=0, alias="BENCHMARK_WORKER_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
