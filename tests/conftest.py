"""Shared fixtures."""

import pytest

from fakes import SOURCE_URL, TARGET_URL
from mongo_compare_indexes.config.settings import Settings, load_settings


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, source_mongo_url=SOURCE_URL, target_mongo_url=TARGET_URL)


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    for name in ("SOURCE_MONGO_URL", "TARGET_MONGO_URL", "LOG_LEVEL", "COMPARE_MAX_CONCURRENCY"):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
