import pytest

from skufolders import config
from skufolders.exceptions import ConfigError


def test_defaults():
    naming = config.configure_naming()
    assert naming.default_prefix == "eci"
    assert naming.prefix_source == "default"
    assert naming.thumbnail_width == 280
    assert naming.thumbnail_width_source == "default"


def test_cli_overrides_environment(monkeypatch):
    monkeypatch.setenv(config.PREFIX_ENV, "env")
    monkeypatch.setenv(config.THUMB_WIDTH_ENV, "300")
    naming = config.configure_naming("cli", 400)
    assert (naming.default_prefix, naming.prefix_source) == ("cli", "cli")
    assert (naming.thumbnail_width, naming.thumbnail_width_source) == (400, "cli")


def test_environment_values_used_when_no_cli(monkeypatch):
    monkeypatch.setenv(config.PREFIX_ENV, "")
    monkeypatch.setenv(config.THUMB_WIDTH_ENV, "180")
    naming = config.configure_naming()
    assert (naming.default_prefix, naming.prefix_source) == ("", "env")
    assert (naming.thumbnail_width, naming.thumbnail_width_source) == (180, "env")


def test_empty_cli_prefix_is_kept():
    assert config.configure_naming("").default_prefix == ""


@pytest.mark.parametrize("raw", ["abc", "100", "501"])
def test_invalid_env_width_is_logged_and_ignored(monkeypatch, raw):
    logged = []
    monkeypatch.setattr(config, "log_warning", logged.append)
    monkeypatch.setenv(config.THUMB_WIDTH_ENV, raw)
    naming = config.configure_naming()
    assert naming.thumbnail_width == config.DEFAULT_THUMBNAIL_WIDTH
    assert any(config.THUMB_WIDTH_ENV in message for message in logged)


def test_invalid_cli_width_raises():
    with pytest.raises(ConfigError):
        config.configure_naming(None, 900)
