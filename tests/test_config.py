"""Tests for configuration loading."""

import pytest

from keyden import config as config_module
from keyden.config import Config, get_config, reload_config


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run each test in an empty cwd with no home config or env overrides."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "CONFIG_DIR", tmp_path / "home")
    for var in ("KEYDEN_TICK_INTERVAL", "KEYDEN_PLACEHOLDER", "KEYDEN_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def _load() -> Config:
    config = Config()
    config.load()
    return config


class TestDefaults:
    """Tests for default configuration."""

    def test_defaults_without_sources(self):
        config = _load()
        assert config.tick_interval == 1.0
        assert config.placeholder == "------"
        assert config.log_level == "INFO"


class TestConfigFile:
    """Tests for TOML configuration files."""

    def test_cwd_config(self, isolated):
        (isolated / "keyden.toml").write_text(
            "[scheduler]\ntick_interval = 0.5\n"
            "[display]\nplaceholder = \"xxxxxx\"\n"
            "[logging]\nlevel = \"debug\"\n"
        )
        config = _load()
        assert config.tick_interval == 0.5
        assert config.placeholder == "xxxxxx"
        assert config.log_level == "DEBUG"

    def test_home_config(self, isolated):
        home = isolated / "home"
        home.mkdir()
        (home / "config.toml").write_text("[scheduler]\ntick_interval = 2\n")
        assert _load().tick_interval == 2.0

    def test_cwd_config_takes_precedence(self, isolated):
        home = isolated / "home"
        home.mkdir()
        (home / "config.toml").write_text("[scheduler]\ntick_interval = 2\n")
        (isolated / "keyden.toml").write_text("[scheduler]\ntick_interval = 3\n")
        assert _load().tick_interval == 3.0

    def test_invalid_toml_uses_defaults(self, isolated):
        (isolated / "keyden.toml").write_text("not = [valid")
        assert _load().tick_interval == 1.0

    def test_invalid_values_are_ignored(self, isolated):
        (isolated / "keyden.toml").write_text(
            "[scheduler]\ntick_interval = -1\n"
            "[display]\nplaceholder = \"\"\n"
            "[logging]\nlevel = \"loud\"\n"
        )
        config = _load()
        assert config.tick_interval == 1.0
        assert config.placeholder == "------"
        assert config.log_level == "INFO"


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_env_overrides_file(self, isolated, monkeypatch):
        (isolated / "keyden.toml").write_text("[scheduler]\ntick_interval = 3\n")
        monkeypatch.setenv("KEYDEN_TICK_INTERVAL", "0.25")
        monkeypatch.setenv("KEYDEN_PLACEHOLDER", "######")
        monkeypatch.setenv("KEYDEN_LOG_LEVEL", "warning")

        config = _load()

        assert config.tick_interval == 0.25
        assert config.placeholder == "######"
        assert config.log_level == "WARNING"

    def test_invalid_env_interval(self, monkeypatch):
        monkeypatch.setenv("KEYDEN_TICK_INTERVAL", "soon")
        assert _load().tick_interval == 1.0


class TestGlobalConfig:
    """Tests for get_config() / reload_config()."""

    def test_get_config_is_cached(self, monkeypatch):
        monkeypatch.setattr(config_module, "_config", None)
        assert get_config() is get_config()

    def test_reload_config_replaces_instance(self, monkeypatch):
        monkeypatch.setattr(config_module, "_config", None)
        first = get_config()
        monkeypatch.setenv("KEYDEN_TICK_INTERVAL", "5")
        second = reload_config()
        assert second is not first
        assert second.tick_interval == 5.0
        assert get_config() is second
