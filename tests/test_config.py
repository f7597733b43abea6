"""Tests for config.py — load_config() precedence and validation."""

from pathlib import Path

import pytest

from uniform_sync.config import Config, load_config, validate_config

_ENV_VARS = [
    "UNIFORM_API_URL",
    "UNIFORM_PROJECTS_FILE",
    "UNIFORM_BACKUP_DIR",
    "UNIFORM_BACKUP",
    "UNIFORM_COMPONENT_LIMIT",
    "UNIFORM_MAX_PARALLEL_REQUESTS",
    "UNIFORM_REQUEST_TIMEOUT",
    "UNIFORM_DEBUG",
    "LOG_LEVEL",
    "LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no UNIFORM_* variables leak in from the developer's shell."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_defaults(self):
        config = load_config()
        assert config.api_url == "https://uniform.app"
        assert config.projects_file == Path("config/projects.json")
        assert config.backup_dir == Path("backups")
        assert config.backup_by_default is True
        assert config.component_page_limit == 10000
        assert config.max_parallel_requests == 4
        assert config.request_timeout == 60.0
        assert config.debug is False
        assert config.log_level is None
        assert config.log_file is None


class TestPrecedence:
    def test_cli_beats_env_and_yaml(self, monkeypatch):
        monkeypatch.setenv("UNIFORM_API_URL", "https://env.example.com")
        config = load_config(
            api_url="https://cli.example.com",
            yaml_fallbacks={"api_url": "https://yaml.example.com"},
        )
        assert config.api_url == "https://cli.example.com"

    def test_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("UNIFORM_PROJECTS_FILE", "/env/projects.json")
        monkeypatch.setenv("UNIFORM_MAX_PARALLEL_REQUESTS", "8")
        config = load_config(
            yaml_fallbacks={
                "projects_file": "/yaml/projects.json",
                "max_parallel_requests": 2,
            }
        )
        assert config.projects_file == Path("/env/projects.json")
        assert config.max_parallel_requests == 8

    def test_yaml_beats_defaults(self):
        config = load_config(
            yaml_fallbacks={
                "api_url": "https://yaml.example.com",
                "backup_dir": "/yaml/backups",
                "backup_by_default": False,
                "component_page_limit": 250,
                "request_timeout": 15,
                "debug": True,
            }
        )
        assert config.api_url == "https://yaml.example.com"
        assert config.backup_dir == Path("/yaml/backups")
        assert config.backup_by_default is False
        assert config.component_page_limit == 250
        assert config.request_timeout == 15.0
        assert config.debug is True

    def test_env_bool_false_beats_yaml_true(self, monkeypatch):
        monkeypatch.setenv("UNIFORM_BACKUP", "false")
        config = load_config(yaml_fallbacks={"backup_by_default": True})
        assert config.backup_by_default is False

    @pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
    def test_env_debug_truthy(self, monkeypatch, value):
        monkeypatch.setenv("UNIFORM_DEBUG", value)
        assert load_config().debug is True

    def test_cli_debug_wins(self, monkeypatch):
        monkeypatch.setenv("UNIFORM_DEBUG", "false")
        assert load_config(debug=True).debug is True

    def test_log_settings_from_yaml(self):
        config = load_config(
            yaml_fallbacks={"log_level": "debug", "log_file": "/yaml/sync.log"}
        )
        assert config.log_level == "DEBUG"
        assert config.log_file == "/yaml/sync.log"

    def test_log_settings_env_and_cli_beat_yaml(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_FILE", "/env/sync.log")
        fallbacks = {"log_level": "DEBUG", "log_file": "/yaml/sync.log"}

        config = load_config(yaml_fallbacks=fallbacks)
        assert config.log_level == "ERROR"
        assert config.log_file == "/env/sync.log"

        config = load_config(log_file="/cli/sync.log", yaml_fallbacks=fallbacks)
        assert config.log_file == "/cli/sync.log"

    def test_paths_expand_user(self):
        config = load_config(projects_file="~/projects.json")
        assert config.projects_file == Path.home() / "projects.json"


class TestValidation:
    def test_trailing_slash_removed(self):
        assert load_config(api_url="https://uniform.app/").api_url == "https://uniform.app"

    @pytest.mark.parametrize("url", ["uniform.app", "ftp://uniform.app", "https://"])
    def test_bad_url(self, url):
        with pytest.raises(ValueError, match="Invalid Uniform API URL"):
            load_config(api_url=url)

    @pytest.mark.parametrize(
        "var,value",
        [
            ("UNIFORM_COMPONENT_LIMIT", "0"),
            ("UNIFORM_COMPONENT_LIMIT", "lots"),
            ("UNIFORM_MAX_PARALLEL_REQUESTS", "101"),
            ("UNIFORM_REQUEST_TIMEOUT", "-1"),
        ],
    )
    def test_bad_env_numbers(self, monkeypatch, var, value):
        monkeypatch.setenv(var, value)
        with pytest.raises(ValueError, match=var):
            load_config()

    def test_validate_config_rejects_bad_parallelism(self):
        with pytest.raises(ValueError, match="max parallel"):
            validate_config(Config(max_parallel_requests=0))

    def test_validate_config_rejects_bad_timeout(self):
        with pytest.raises(ValueError, match="request timeout"):
            validate_config(Config(request_timeout=0))

    def test_bad_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValueError, match="Invalid log level 'LOUD'"):
            load_config()
