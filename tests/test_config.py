"""Tests for configuration loading, validation and the CLI."""

import configparser

import pytest
from typer.testing import CliRunner

from zipjob import __version__
from zipjob.cli.app import app
from zipjob.exceptions import ConfigurationError
from zipjob.models.config import ServiceConfig
from zipjob.storage.config_manager import ConfigManager


def test_defaults():
    config = ServiceConfig()
    assert config.max_parallel == 3
    assert config.fetch_timeout == 15.0
    assert config.max_file_bytes == 25 * 1024 * 1024
    assert config.files_prefix == "/files/"
    assert config.staging_dir == "tmp"
    assert config.output_dir == "results"


@pytest.mark.parametrize(
    "field, value",
    [
        ("max_parallel", 0),
        ("max_parallel", 65),
        ("port", 0),
        ("fetch_timeout", 0),
        ("max_file_mb", 0),
        ("fetch_attempts", 6),
        ("files_prefix", "files"),
        ("files_prefix", "/"),
    ],
)
def test_invalid_values(field, value):
    with pytest.raises(ValueError):
        ServiceConfig(**{field: value})


def test_staging_and_output_must_differ():
    with pytest.raises(ValueError):
        ServiceConfig(staging_dir="data", output_dir="data")


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(tmp_path / "config.ini").load_config()
    assert config == ServiceConfig(config_path=str(tmp_path))


def test_file_values_and_cli_overrides(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[DEFAULT]\nport = 9000\nmax_parallel = 5\noutput_dir = archives\n",
        encoding="utf-8",
    )

    config = ConfigManager(path).load_config({"max_parallel": 2})

    assert config.port == 9000
    assert config.output_dir == "archives"
    assert config.max_parallel == 2


def test_missing_keys_are_migrated(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nport = 9000\n", encoding="utf-8")

    ConfigManager(path).load_config()

    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")
    assert parser["DEFAULT"]["port"] == "9000"
    assert set(ServiceConfig.get_ini_keys()) <= set(parser["DEFAULT"].keys())


def test_invalid_file_values(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_parallel = lots\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigManager(path).load_config()

    path.write_text("[DEFAULT]\nmax_parallel = 100\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigManager(path).load_config()


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.ini"
    manager = ConfigManager(path)
    manager.save_new_config({"port": 8181, "files_prefix": "/archives/"})

    config = ConfigManager(path).load_config()
    assert config.port == 8181
    assert config.files_prefix == "/archives/"
    assert config.max_parallel == 3


def test_cli_version():
    result = CliRunner().invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_init_and_validate(tmp_path):
    path = tmp_path / "config.ini"
    runner = CliRunner()

    result = runner.invoke(app, ["--config", str(path), "init"])
    assert result.exit_code == 0
    assert path.is_file()

    result = runner.invoke(app, ["--config", str(path), "validate"])
    assert result.exit_code == 0
    assert "Validated Settings" in result.output


def test_cli_validate_reports_errors(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nport = 0\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["--config", str(path), "validate"])
    assert result.exit_code == 1
    assert "invalid" in result.output
