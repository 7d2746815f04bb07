import os
import uuid
from urllib.parse import urlparse

import pytest

from config import get_runtime_config
from registry_bench import create_app


def _resolve_test_db_uri() -> str | None:
    db_uri = (os.environ.get("TEST_DATABASE_URL") or "").strip()
    if not db_uri:
        return None

    if db_uri.startswith(("postgresql://", "postgresql+psycopg://", "postgres://")):
        parsed = urlparse(db_uri)
        db_name = (parsed.path or "").lstrip("/")
        if not db_name or "test" not in db_name.lower():
            raise RuntimeError(
                "Refusing to run pytest on non-test Postgres DB. "
                "Use TEST_DATABASE_URL with a database name containing 'test'."
            )
        if db_uri.startswith("postgres://"):
            return db_uri.replace("postgres://", "postgresql+psycopg://", 1)
        if db_uri.startswith("postgresql://"):
            return db_uri.replace("postgresql://", "postgresql+psycopg://", 1)
        return db_uri

    raise RuntimeError(
        "Unsupported TEST_DATABASE_URL scheme. "
        "Use postgresql+psycopg://..."
    )


@pytest.fixture()
def make_config(tmp_path):
    """Build an AppConfig from an explicit env mapping rooted in tmp_path."""

    def _make(**overrides):
        env = {
            "BENCH_LOG_DIR": str(tmp_path / "logs"),
            "BENCH_RESULTS_DIR": str(tmp_path / "results"),
        }
        env.update({key: str(value) for key, value in overrides.items()})
        return get_runtime_config(env)

    return _make


@pytest.fixture()
def app(make_config):
    app = create_app(make_config(TABLE_VARIANT="part"), db_uri_override="sqlite://")
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def pg_engine():
    db_uri = _resolve_test_db_uri()
    if db_uri is None:
        pytest.skip("TEST_DATABASE_URL is not set")
    from sqlalchemy import create_engine

    engine = create_engine(db_uri, future=True)
    yield engine
    engine.dispose()


@pytest.fixture()
def pg_schema(pg_engine):
    """Throw-away schema dropped after the test."""
    from sqlalchemy import text

    schema = f"bench_test_{uuid.uuid4().hex[:8]}"
    yield schema
    with pg_engine.begin() as conn:
        conn.execute(text(f'DROP SCHEMA IF EXISTS "{schema}" CASCADE'))
