"""Default values shared by the configuration readers."""

from pathlib import Path

# PostgreSQL
DEFAULT_PG_HOST = "localhost"
DEFAULT_PG_PORT = 5432
DEFAULT_PG_USER = "postgres"
DEFAULT_PG_PASSWORD = "postgres"
DEFAULT_PG_DATABASE = "appdb"
DEFAULT_BENCH_SCHEMA = "bench"

# Trino
DEFAULT_TRINO_HOST = "localhost"
DEFAULT_TRINO_PORT = 8080
DEFAULT_TRINO_CATALOG = "postgres"
DEFAULT_TRINO_SCHEMA = "bench"
DEFAULT_TRINO_USER = "trino"

# Benchmark
BENCH_MODES = ("postgres", "trino")
DEFAULT_BENCH_MODE = "postgres"
DEFAULT_TABLE_VARIANT = "plain"
DEFAULT_BATCH_SIZE = 100_000_000  # rows added per orchestrator round
DEFAULT_RECORD_MAX = 500_000_000  # target total rows
DEFAULT_FILL_BATCH = 5_000_000  # rows per INSERT ... SELECT statement
DEFAULT_TRINO_CHUNK_MAX = 1000  # rows per literal VALUES batch
DEFAULT_SAMPLES = 100
DEFAULT_RUNS = 5
DEFAULT_DISCOVERY_LIMIT = 20
DEFAULT_REPAIR_FIXTURES = False

DEFAULT_LOG_DIR = Path("logs")
DEFAULT_RESULTS_DIR = Path("results")
DEFAULT_STATE_FILENAME = "bench-full-state.json"

# HTTP API
DEFAULT_API_PORT = 3000
DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"
