"""Tests for configuration loading."""

import pytest
from pathlib import Path

from cortex.config import CortexConfig, load_config
from cortex.result import ErrorCode

ENV_KEYS = ["CORTEX_STORE_DIR", "CORTEX_DEFAULT_STORE", "CORTEX_LOG_LEVEL"]


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestConfig:
    def test_defaults(self, clean_env):
        config = load_config()
        assert config.default_store == "default"
        assert config.stores["default"].name == "memory"
        assert config.index.create_when_missing is True
        assert config.index.memory_extension == ".md"
        assert config.index.index_file == "index.yaml"
        assert config.log_level == "INFO"

    def test_env_override(self, tmp_path: Path, clean_env):
        clean_env.setenv("CORTEX_STORE_DIR", str(tmp_path / "store"))
        clean_env.setenv("CORTEX_LOG_LEVEL", "DEBUG")

        config = load_config()
        assert config.stores["default"] == tmp_path / "store"
        assert config.log_level == "DEBUG"

    def test_toml_file(self, tmp_path: Path, clean_env):
        toml_path = tmp_path / "cortex.toml"
        toml_path.write_text("""
default_store = "work"
log_level = "WARNING"

[stores]
work = "/srv/cortex/work"
home = "~/notes"

[index]
create_when_missing = false
memory_extension = "markdown"
""")
        config = load_config(toml_path)
        assert config.default_store == "work"
        assert config.stores["work"] == Path("/srv/cortex/work")
        assert config.stores["home"] == Path.home() / "notes"
        assert config.index.create_when_missing is False
        assert config.index.memory_extension == ".markdown"
        assert config.log_level == "WARNING"

    def test_cwd_file_is_found(self, tmp_path: Path, clean_env):
        (tmp_path / "cortex.toml").write_text('[stores]\ndefault = "/data/cortex"\n')
        config = load_config()
        assert config.stores["default"] == Path("/data/cortex")

    def test_env_overrides_toml(self, tmp_path: Path, clean_env):
        clean_env.setenv("CORTEX_DEFAULT_STORE", "home")
        clean_env.setenv("CORTEX_STORE_DIR", str(tmp_path / "override"))

        toml_path = tmp_path / "cortex.toml"
        toml_path.write_text("""
default_store = "work"

[stores]
work = "/srv/cortex/work"
home = "/srv/cortex/home"
""")
        config = load_config(toml_path)
        assert config.default_store == "home"  # env wins
        assert config.stores["home"] == tmp_path / "override"
        assert config.stores["work"] == Path("/srv/cortex/work")


class TestStorePath:
    def test_default_store(self, tmp_path: Path):
        config = CortexConfig(stores={"default": tmp_path})
        result = config.store_path()
        assert result.ok
        assert result.value == tmp_path

    def test_named_store(self, tmp_path: Path):
        config = CortexConfig(stores={"default": tmp_path, "work": tmp_path / "work"})
        assert config.store_path("work").value == tmp_path / "work"

    def test_unknown_store(self, tmp_path: Path):
        config = CortexConfig(stores={"default": tmp_path})
        result = config.store_path("missing")
        assert not result.ok
        assert result.error.code == ErrorCode.STORE_NOT_FOUND
