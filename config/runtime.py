"""Runtime configuration - environment-driven settings.

Reads environment variables and applies defaults. The result is built once
per process and handed to every component explicitly.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from .base import (
    DEFAULT_API_PORT,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BENCH_MODE,
    DEFAULT_BENCH_SCHEMA,
    DEFAULT_DISCOVERY_LIMIT,
    DEFAULT_FILL_BATCH,
    DEFAULT_LOG_DIR,
    DEFAULT_PG_DATABASE,
    DEFAULT_PG_HOST,
    DEFAULT_PG_PASSWORD,
    DEFAULT_PG_PORT,
    DEFAULT_PG_USER,
    DEFAULT_RECORD_MAX,
    DEFAULT_REPAIR_FIXTURES,
    DEFAULT_RESULTS_DIR,
    DEFAULT_RUNS,
    DEFAULT_SAMPLES,
    DEFAULT_SECRET_KEY,
    DEFAULT_TABLE_VARIANT,
    DEFAULT_TRINO_CATALOG,
    DEFAULT_TRINO_CHUNK_MAX,
    DEFAULT_TRINO_HOST,
    DEFAULT_TRINO_PORT,
    DEFAULT_TRINO_SCHEMA,
    DEFAULT_TRINO_USER,
)
from .schema import ApiConfig, AppConfig, BenchSettings, PostgresConfig, TrinoConfig


def _env_flag(name, default=False, env: Optional[Mapping] = None):
    """Read a boolean environment variable."""
    source = os.environ if env is None else env
    value = source.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def _env_int(name, default, env: Optional[Mapping] = None):
    """Read an integer environment variable."""
    source = os.environ if env is None else env
    value = source.get(name)
    if value is None:
        return default
    try:
        return int(value.replace("_", ""))
    except ValueError:
        return default


def _normalize_db_uri(uri: str) -> str:
    """Rewrite legacy Postgres schemes to the psycopg SQLAlchemy dialect."""
    if uri.startswith("postgres://"):
        return uri.replace("postgres://", "postgresql+psycopg://", 1)
    if uri.startswith("postgresql://"):
        return uri.replace("postgresql://", "postgresql+psycopg://", 1)
    return uri


def get_postgres_config(env: Optional[Mapping] = None) -> PostgresConfig:
    source = os.environ if env is None else env
    url = (source.get("DATABASE_URL") or "").strip()
    return PostgresConfig(
        host=source.get("PG_HOST", DEFAULT_PG_HOST),
        port=_env_int("PG_PORT", DEFAULT_PG_PORT, env),
        user=source.get("PG_USER", DEFAULT_PG_USER),
        password=source.get("PG_PASSWORD", DEFAULT_PG_PASSWORD),
        database=source.get("PG_DATABASE", DEFAULT_PG_DATABASE),
        schema=source.get("BENCH_SCHEMA", DEFAULT_BENCH_SCHEMA),
        url=_normalize_db_uri(url) if url else None,
    )


def get_trino_config(env: Optional[Mapping] = None) -> TrinoConfig:
    source = os.environ if env is None else env
    return TrinoConfig(
        host=source.get("TRINO_HOST", DEFAULT_TRINO_HOST),
        port=_env_int("TRINO_PORT", DEFAULT_TRINO_PORT, env),
        catalog=source.get("TRINO_CATALOG", DEFAULT_TRINO_CATALOG),
        schema=source.get("TRINO_SCHEMA", DEFAULT_TRINO_SCHEMA),
        user=source.get("TRINO_USER", DEFAULT_TRINO_USER),
    )


def get_bench_settings(env: Optional[Mapping] = None) -> BenchSettings:
    source = os.environ if env is None else env
    log_dir = Path(source.get("BENCH_LOG_DIR", str(DEFAULT_LOG_DIR)))
    state_file = source.get("BENCH_STATE_FILE")
    return BenchSettings(
        mode=source.get("BENCH_MODE", DEFAULT_BENCH_MODE),
        table_variant=source.get("TABLE_VARIANT", DEFAULT_TABLE_VARIANT),
        batch_size=_env_int("BATCH_SIZE", DEFAULT_BATCH_SIZE, env),
        record_max=_env_int("RECORD_MAX", DEFAULT_RECORD_MAX, env),
        fill_batch=_env_int("FILL_BATCH", DEFAULT_FILL_BATCH, env),
        trino_chunk_max=_env_int("TRINO_CHUNK_MAX", DEFAULT_TRINO_CHUNK_MAX, env),
        samples=_env_int("BENCH_SAMPLES", DEFAULT_SAMPLES, env),
        runs=_env_int("BENCH_RUNS", DEFAULT_RUNS, env),
        discovery_limit=_env_int(
            "BENCH_DISCOVERY_LIMIT", DEFAULT_DISCOVERY_LIMIT, env
        ),
        repair_fixtures=_env_flag(
            "BENCH_REPAIR_FIXTURES", default=DEFAULT_REPAIR_FIXTURES, env=env
        ),
        log_dir=log_dir,
        results_dir=Path(source.get("BENCH_RESULTS_DIR", str(DEFAULT_RESULTS_DIR))),
        state_file=Path(state_file) if state_file else None,
    )


def get_runtime_config(env: Optional[Mapping] = None) -> AppConfig:
    """
    Build the full configuration from environment variables.

    Args:
        env: Mapping to read instead of ``os.environ`` (used by tests).

    Returns:
        AppConfig instance
    """
    source = os.environ if env is None else env
    return AppConfig(
        postgres=get_postgres_config(env),
        trino=get_trino_config(env),
        bench=get_bench_settings(env),
        api=ApiConfig(port=_env_int("API_PORT", DEFAULT_API_PORT, env)),
        secret_key=source.get("SECRET_KEY", DEFAULT_SECRET_KEY),
    )


__all__ = [
    "get_runtime_config",
    "get_postgres_config",
    "get_trino_config",
    "get_bench_settings",
    "_env_flag",
    "_env_int",
    "_normalize_db_uri",
]
