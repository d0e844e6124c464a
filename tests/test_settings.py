"""Tests for settings loading and endpoint validation."""

import pytest

from mongo_compare_indexes.config.exceptions import ConfigurationError
from mongo_compare_indexes.config.settings import (
    Settings,
    load_settings,
    require_connection_urls,
    validate_mongo_url,
)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.source_mongo_url == ""
    assert settings.mongo_default_database == "test"
    assert settings.compare_max_concurrency == 8
    assert settings.compare_include_system_collections is False
    assert settings.compare_detect_divergent is True
    assert settings.log_level == "INFO"


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("SOURCE_MONGO_URL", "  mongodb://src/app  ")
    monkeypatch.setenv("TARGET_MONGO_URL", "mongodb+srv://cluster.example.net/app")
    monkeypatch.setenv("COMPARE_MAX_CONCURRENCY", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.source_mongo_url == "mongodb://src/app"
    assert settings.target_mongo_url == "mongodb+srv://cluster.example.net/app"
    assert settings.compare_max_concurrency == 2
    assert settings.log_level == "DEBUG"
    assert load_settings() is settings


def test_invalid_environment_value(monkeypatch):
    monkeypatch.setenv("COMPARE_MAX_CONCURRENCY", "0")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_overrides_skip_none_and_validate(settings):
    updated = settings.with_overrides(compare_max_concurrency=4, source_mongo_url=None)

    assert updated.compare_max_concurrency == 4
    assert updated.source_mongo_url == settings.source_mongo_url
    assert settings.compare_max_concurrency == 8

    with pytest.raises(ConfigurationError):
        settings.with_overrides(mongo_timeout_ms=-1)


def test_validate_mongo_url():
    assert validate_mongo_url(" mongodb://h/db ", "source") == "mongodb://h/db"

    with pytest.raises(ConfigurationError, match="Missing target"):
        validate_mongo_url(None, "target")
    with pytest.raises(ConfigurationError, match="Malformed source"):
        validate_mongo_url("http://h/db", "source")


def test_require_connection_urls():
    assert require_connection_urls("mongodb://a/x", "mongodb://b/y") == ("mongodb://a/x", "mongodb://b/y")

    with pytest.raises(ConfigurationError, match="TARGET_MONGO_URL"):
        require_connection_urls("mongodb://a/x", "")
