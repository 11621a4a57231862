"""
Tests for settings loading and run configuration.
"""

import pytest
from pydantic import ValidationError

from cbfsrestore.core.config import RestoreConfig, RestoreSettings, get_settings
from cbfsrestore.core.errors import ConfigurationError


def test_defaults():
    settings = get_settings()
    config = settings.to_config()

    assert config.base_url == "http://localhost:8484/"
    assert config.match == ".*"
    assert config.workers == 4
    assert config.queue_size == 1
    assert config.dry_run is False
    assert config.request_timeout is None
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CBFS_RESTORE_BASE_URL", "http://cbfs:9000/")
    monkeypatch.setenv("CBFS_RESTORE_WORKERS", "8")
    monkeypatch.setenv("CBFS_RESTORE_DRY_RUN", "true")

    config = RestoreSettings().to_config()
    assert config.base_url == "http://cbfs:9000/"
    assert config.workers == 8
    assert config.dry_run is True


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("CBFS_RESTORE_MATCH=^photos/\nUNRELATED=1\n")
    assert RestoreSettings().match == "^photos/"


def test_get_settings_wraps_invalid_environment(monkeypatch):
    monkeypatch.setenv("CBFS_RESTORE_WORKERS", "abc")
    with pytest.raises(ConfigurationError):
        get_settings()


def test_overrides_skip_none():
    config = RestoreSettings().to_config(workers=2, match=None, dry_run=None)
    assert config.workers == 2
    assert config.match == ".*"
    assert config.dry_run is False


@pytest.mark.parametrize("overrides", [{"workers": 0}, {"queue_size": -1}, {"request_timeout": 0}])
def test_invalid_values_are_configuration_errors(overrides):
    with pytest.raises(ConfigurationError):
        RestoreSettings().to_config(**overrides)


def test_config_is_immutable():
    config = RestoreConfig()
    with pytest.raises(ValidationError):
        config.workers = 10


def test_unknown_fields_rejected():
    with pytest.raises(ConfigurationError):
        RestoreConfig.build(wokers=3)
