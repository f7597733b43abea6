"""Tests for config_schema.py — YAML config models and flattening."""

import pytest
from pydantic import ValidationError

from uniform_sync.config_schema import (
    StorageConfig,
    UnifiedConfig,
    UniformConfig,
    build_config,
    to_fallbacks,
)


def test_empty_input_gives_defaults():
    unified = build_config({})
    assert unified == UnifiedConfig()
    assert unified.logging.level is None
    assert unified.uniform.api_url is None


def test_sections_parsed():
    unified = build_config(
        {
            "uniform": {"api_url": "https://u.example.com", "request_timeout": 5},
            "storage": {"backup_dir": "/b", "backup_by_default": False},
            "logging": {"level": "DEBUG", "file": "/tmp/x.log"},
        }
    )
    assert unified.uniform.request_timeout == 5.0
    assert unified.storage.backup_by_default is False
    assert unified.logging.file == "/tmp/x.log"


@pytest.mark.parametrize(
    "section",
    [
        {"component_page_limit": 0},
        {"max_parallel_requests": 101},
        {"request_timeout": 0},
    ],
)
def test_out_of_range_rejected(section):
    with pytest.raises(ValidationError):
        UniformConfig(**section)


def test_to_fallbacks_drops_unset_values():
    unified = UnifiedConfig(
        uniform=UniformConfig(api_url="https://u.example.com", max_parallel_requests=3),
        storage=StorageConfig(projects_file="/p.json"),
    )
    assert to_fallbacks(unified) == {
        "api_url": "https://u.example.com",
        "max_parallel_requests": 3,
        "debug": False,
        "projects_file": "/p.json",
    }


def test_fallbacks_feed_load_config(monkeypatch):
    from uniform_sync.config import load_config

    for var in ("UNIFORM_API_URL", "UNIFORM_COMPONENT_LIMIT", "UNIFORM_BACKUP"):
        monkeypatch.delenv(var, raising=False)
    unified = build_config(
        {
            "uniform": {"api_url": "https://u.example.com", "component_page_limit": 50},
            "storage": {"backup_by_default": False},
        }
    )
    config = load_config(yaml_fallbacks=to_fallbacks(unified))
    assert config.api_url == "https://u.example.com"
    assert config.component_page_limit == 50
    assert config.backup_by_default is False


def test_logging_section_becomes_fallbacks():
    unified = build_config({"logging": {"level": "DEBUG", "file": "/tmp/x.log"}})
    fallbacks = to_fallbacks(unified)
    assert fallbacks["log_level"] == "DEBUG"
    assert fallbacks["log_file"] == "/tmp/x.log"
