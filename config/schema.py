"""Configuration schema dataclasses.

Minimal dataclasses for connection, benchmark and API configuration.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from .base import (
    BENCH_MODES,
    DEFAULT_API_PORT,
    DEFAULT_BATCH_SIZE,
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
    DEFAULT_RESULTS_DIR,
    DEFAULT_RUNS,
    DEFAULT_SAMPLES,
    DEFAULT_SECRET_KEY,
    DEFAULT_STATE_FILENAME,
    DEFAULT_TABLE_VARIANT,
    DEFAULT_TRINO_CATALOG,
    DEFAULT_TRINO_CHUNK_MAX,
    DEFAULT_TRINO_HOST,
    DEFAULT_TRINO_PORT,
    DEFAULT_TRINO_SCHEMA,
    DEFAULT_TRINO_USER,
)

TABLE_VARIANT_NAMES = ("plain", "part", "idx", "idx_part")


@dataclass
class PostgresConfig:
    """PostgreSQL connection settings."""

    host: str = DEFAULT_PG_HOST
    port: int = DEFAULT_PG_PORT
    user: str = DEFAULT_PG_USER
    password: str = DEFAULT_PG_PASSWORD
    database: str = DEFAULT_PG_DATABASE
    schema: str = DEFAULT_BENCH_SCHEMA
    # Explicit DATABASE_URL wins over the composed URI.
    url: Optional[str] = None

    def __post_init__(self):
        if self.port <= 0:
            raise ValueError("PG_PORT must be > 0")
        if not self.schema:
            raise ValueError("BENCH_SCHEMA must not be empty")

    @property
    def db_uri(self) -> str:
        if self.url:
            return self.url
        return (
            f"postgresql+psycopg://{quote(self.user, safe='')}:"
            f"{quote(self.password, safe='')}@{self.host}:{self.port}/{self.database}"
        )


@dataclass
class TrinoConfig:
    """Trino coordinator settings (only used when BENCH_MODE=trino)."""

    host: str = DEFAULT_TRINO_HOST
    port: int = DEFAULT_TRINO_PORT
    catalog: str = DEFAULT_TRINO_CATALOG
    schema: str = DEFAULT_TRINO_SCHEMA
    user: str = DEFAULT_TRINO_USER

    def __post_init__(self):
        if self.port <= 0:
            raise ValueError("TRINO_PORT must be > 0")


@dataclass
class BenchSettings:
    """Benchmark sizing and output locations."""

    mode: str = "postgres"
    table_variant: str = DEFAULT_TABLE_VARIANT
    batch_size: int = DEFAULT_BATCH_SIZE
    record_max: int = DEFAULT_RECORD_MAX
    fill_batch: int = DEFAULT_FILL_BATCH
    trino_chunk_max: int = DEFAULT_TRINO_CHUNK_MAX
    samples: int = DEFAULT_SAMPLES
    runs: int = DEFAULT_RUNS
    discovery_limit: int = DEFAULT_DISCOVERY_LIMIT
    repair_fixtures: bool = False
    log_dir: Path = field(default_factory=lambda: DEFAULT_LOG_DIR)
    results_dir: Path = field(default_factory=lambda: DEFAULT_RESULTS_DIR)
    state_file: Optional[Path] = None

    def __post_init__(self):
        """Validate after initialization."""
        if self.mode not in BENCH_MODES:
            raise ValueError("BENCH_MODE must be one of postgres|trino")
        if self.table_variant not in TABLE_VARIANT_NAMES:
            raise ValueError(
                "TABLE_VARIANT must be one of " + "|".join(TABLE_VARIANT_NAMES)
            )
        for name in (
            "batch_size",
            "record_max",
            "fill_batch",
            "trino_chunk_max",
            "samples",
            "runs",
            "discovery_limit",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be > 0")
        if not isinstance(self.log_dir, Path):
            self.log_dir = Path(self.log_dir)
        if not isinstance(self.results_dir, Path):
            self.results_dir = Path(self.results_dir)
        if self.state_file is None:
            self.state_file = self.log_dir / DEFAULT_STATE_FILENAME
        elif not isinstance(self.state_file, Path):
            self.state_file = Path(self.state_file)


@dataclass
class ApiConfig:
    """HTTP insertion endpoint settings."""

    port: int = DEFAULT_API_PORT

    def __post_init__(self):
        if self.port <= 0:
            raise ValueError("API_PORT must be > 0")


@dataclass
class AppConfig:
    """Application configuration - composition of all sections."""

    postgres: PostgresConfig
    trino: TrinoConfig
    bench: BenchSettings
    api: ApiConfig = field(default_factory=ApiConfig)

    # Flask-specific settings
    secret_key: str = DEFAULT_SECRET_KEY


__all__ = [
    "TABLE_VARIANT_NAMES",
    "PostgresConfig",
    "TrinoConfig",
    "BenchSettings",
    "ApiConfig",
    "AppConfig",
]
