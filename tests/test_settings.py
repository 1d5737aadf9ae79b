import os

import pytest

from etu.core.errors import ConfigFileError, UnsupportedFormatError
from etu.core.settings import Settings, config_path, load_settings


def test_missing_file_gives_defaults(isolated_config):
    assert not isolated_config.exists()

    assert load_settings() == Settings()


def test_env_var_selects_config_path(isolated_config):
    assert config_path() == isolated_config


def test_default_path_without_env(monkeypatch):
    monkeypatch.delenv("ETUCONFIG", raising=False)

    assert str(config_path()).endswith(os.path.join(".config", "etu", "config.yaml"))


def test_values_are_read(isolated_config):
    isolated_config.write_text("log-level: DEBUG\ndefault-format: json\nstrict: true\n")
    os.chmod(isolated_config, 0o600)

    settings = load_settings()

    assert settings == Settings(log_level="debug", default_format="json", strict=True)


def test_empty_file_gives_defaults(isolated_config):
    isolated_config.write_text("# nothing here\n")

    assert load_settings() == Settings()


def test_flags_override_file_values():
    settings = Settings(log_level="info", default_format="yaml", strict=True)

    assert settings.resolve_format(None) == "yaml"
    assert settings.resolve_format("json") == "json"
    assert settings.resolve_strict(None) is True
    assert settings.resolve_strict(False) is False
    assert settings.resolve_log_level("error") == "error"
    assert settings.resolve_log_level(None) == "info"


@pytest.mark.parametrize("content, error", [
    ("log-level: chatty\n", ConfigFileError),
    ("strict: maybe\n", ConfigFileError),
    ("- a\n- b\n", ConfigFileError),
    ("log-level: [unclosed\n", ConfigFileError),
    ("default-format: toml\n", UnsupportedFormatError),
])
def test_invalid_files_are_rejected(isolated_config, content, error):
    isolated_config.write_text(content)

    with pytest.raises(error):
        load_settings()


def test_open_permissions_only_warn(isolated_config, caplog):
    isolated_config.write_text("strict: false\n")
    os.chmod(isolated_config, 0o644)

    with caplog.at_level("WARNING", logger="etu.core.settings"):
        settings = load_settings()

    assert settings.strict is False
    assert "Consider changing to 0600" in caplog.text
