"""Configuration loading from environment variables and cortex.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from cortex.result import ErrorCode, Result, err, ok

_DEFAULT_STORE_DIR = Path.home() / ".cortex" / "memory"
_DEFAULT_STORE_NAME = "default"
_CONFIG_FILENAME = "cortex.toml"


@dataclass
class IndexConfig:
    """Index engine settings."""

    create_when_missing: bool = True
    memory_extension: str = ".md"
    index_file: str = "index.yaml"


@dataclass
class CortexConfig:
    """Top-level Cortex configuration."""

    stores: dict[str, Path] = field(
        default_factory=lambda: {_DEFAULT_STORE_NAME: _DEFAULT_STORE_DIR}
    )
    default_store: str = _DEFAULT_STORE_NAME
    index: IndexConfig = field(default_factory=IndexConfig)
    log_level: str = "INFO"

    def store_path(self, name: str | None = None) -> Result[Path]:
        """Resolve a store name (default store when None) to its root directory."""
        name = name or self.default_store
        path = self.stores.get(name)
        if path is None:
            return err(
                ErrorCode.STORE_NOT_FOUND,
                f"Store '{name}' is not configured. Available: {sorted(self.stores)}",
            )
        return ok(path)


def _normalize_extension(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def load_config(config_path: Path | None = None) -> CortexConfig:
    """Load configuration from environment variables and optional cortex.toml.

    Priority: environment variables > cortex.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.cortex/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".cortex" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    index_data = file_data.get("index", {})
    default_store = os.getenv(
        "CORTEX_DEFAULT_STORE", file_data.get("default_store", _DEFAULT_STORE_NAME)
    )

    stores = {
        name: Path(raw).expanduser() for name, raw in file_data.get("stores", {}).items()
    }
    store_dir = os.getenv("CORTEX_STORE_DIR")
    if store_dir:
        stores[default_store] = Path(store_dir).expanduser()
    elif not stores:
        stores[default_store] = _DEFAULT_STORE_DIR

    return CortexConfig(
        stores=stores,
        default_store=default_store,
        index=IndexConfig(
            create_when_missing=bool(index_data.get("create_when_missing", True)),
            memory_extension=_normalize_extension(index_data.get("memory_extension", ".md")),
            index_file=index_data.get("index_file", "index.yaml"),
        ),
        log_level=os.getenv("CORTEX_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
