"""
Tests for configuration loading, environment overrides and validation.
"""

import json

import pytest

from mokee_setupwizard.config import settings
from mokee_setupwizard.config.settings import (
    AppConfig, LogLevel, NetworkConfig, WizardConfig, UIConfig, get_config, init_config
)


ENV_VARS = (
    "CAPTIVE_PORTAL_SERVER",
    "SETUPWIZARD_DEBUG",
    "SETUPWIZARD_LOG_LEVEL",
    "SETUPWIZARD_GUEST_USER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AppConfig()

    assert config.network.captive_portal_server is None
    assert config.network.probe_timeout_ms == 10000
    assert config.get_probe_timeout_seconds() == 10.0
    assert config.wizard.guest_user is False
    assert config.log_level is LogLevel.INFO
    assert config.get_color("accent") == "#1de9b6"
    assert config.get_color("missing") == "#000000"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CAPTIVE_PORTAL_SERVER", " probe.example ")
    monkeypatch.setenv("SETUPWIZARD_DEBUG", "yes")
    monkeypatch.setenv("SETUPWIZARD_GUEST_USER", "1")

    config = AppConfig()

    assert config.network.captive_portal_server == "probe.example"
    assert config.debug_mode is True
    assert config.log_level is LogLevel.DEBUG
    assert config.wizard.guest_user is True


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("SETUPWIZARD_LOG_LEVEL", "warning")
    assert AppConfig().log_level is LogLevel.WARNING

    monkeypatch.setenv("SETUPWIZARD_LOG_LEVEL", "chatty")
    assert AppConfig().log_level is LogLevel.INFO


@pytest.mark.parametrize("kwargs", [
    {"network": NetworkConfig(probe_timeout_ms=0)},
    {"network": NetworkConfig(probe_path="generate_204")},
    {"network": NetworkConfig(captive_portal_server="http://probe.example/")},
    {"network": NetworkConfig(captive_portal_server="")},
    {"wizard": WizardConfig(worker_threads=0)},
    {"wizard": WizardConfig(account_type="")},
    {"ui": UIConfig(finish_animation_ms=-1)},
])
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        AppConfig(**kwargs)


def test_save_and_load_round_trip(tmp_path):
    config = AppConfig()
    config.network.captive_portal_server = "probe.example:8080"
    config.wizard.guest_user = True
    config.log_level = LogLevel.ERROR
    path = tmp_path / "conf" / "config.json"

    config.save_to_file(path)
    loaded = AppConfig.load_from_file(path)

    assert json.loads(path.read_text())["log_level"] == "ERROR"
    assert loaded.network.captive_portal_server == "probe.example:8080"
    assert loaded.wizard.guest_user is True
    assert loaded.log_level is LogLevel.ERROR
    assert loaded.ui.colors == config.ui.colors


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_file(tmp_path / "nope.json")


def test_load_invalid_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"network": {"probe_timeout_ms": -5}}))

    with pytest.raises(ValueError):
        AppConfig.load_from_file(path)


def test_init_config_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "_global_config", None)
    path = tmp_path / "config.json"
    path.write_text("{broken")

    config = init_config(path)

    assert get_config() is config
    assert config.network.probe_path == "/generate_204"


def test_get_config_before_init(monkeypatch):
    monkeypatch.setattr(settings, "_global_config", None)
    with pytest.raises(RuntimeError):
        get_config()


def test_relative_paths_resolve_under_config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(AppConfig, "get_config_dir", lambda self: tmp_path)
    config = AppConfig()

    assert config.get_state_file_path() == tmp_path / "setupwizard_state.json"
    config.paths.state_file = str(tmp_path / "elsewhere.json")
    assert config.get_state_file_path() == tmp_path / "elsewhere.json"
