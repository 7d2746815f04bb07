"""Configuration package.

``load_config`` is called once by each entry point; the returned
``AppConfig`` is passed down explicitly.
"""

from dotenv import load_dotenv

from .runtime import get_runtime_config
from .schema import (
    TABLE_VARIANT_NAMES,
    ApiConfig,
    AppConfig,
    BenchSettings,
    PostgresConfig,
    TrinoConfig,
)


def load_config(env=None, *, dotenv: bool = True) -> AppConfig:
    """Load ``.env`` (unless disabled) and build the application config."""
    if dotenv and env is None:
        load_dotenv()
    return get_runtime_config(env)


__all__ = [
    "load_config",
    "get_runtime_config",
    "TABLE_VARIANT_NAMES",
    "ApiConfig",
    "AppConfig",
    "BenchSettings",
    "PostgresConfig",
    "TrinoConfig",
]
