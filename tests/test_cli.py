"""Tests for the command line interface."""

import io
import json

import pytest
from rich.console import Console

from fakes import SOURCE_URL, TARGET_URL
from mongo_compare_indexes.comparison.exceptions import ConnectivityError
from mongo_compare_indexes.comparison.models import (
    ComparisonReport,
    DivergentIndexRecord,
    IndexDiff,
    MissingIndexRecord,
)
from mongo_compare_indexes.interfaces.cli import cli

REPORT = ComparisonReport(
    diff=IndexDiff(
        missing_in_target=[
            MissingIndexRecord(collection="users", index_name="email_1", index_value={"email": 1})
        ],
        divergent=[
            DivergentIndexRecord(
                collection="places",
                index_name="loc_1",
                source_value={"loc": "2dsphere"},
                target_value={"loc": "2d"},
            )
        ],
    ),
    source_index_count=3,
    target_index_count=2,
    elapsed_ms=12.5,
)


@pytest.fixture(autouse=True)
def keep_log_capture(monkeypatch):
    # basicConfig(force=True) would remove the caplog handler
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: None)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    async def fake_compare(source_url, target_url, settings, *, skip_missing=False):
        recorded.append((source_url, target_url, settings, skip_missing))
        return REPORT

    monkeypatch.setattr(cli, "compare_indexes", fake_compare)
    return recorded


def output(console):
    return console.file.getvalue()


def test_table_output(calls, console):
    code = cli.main(["run", SOURCE_URL, TARGET_URL], console=console)

    assert code == cli.EXIT_OK
    text = output(console)
    assert "Missing indexes in target" in text
    assert "email_1" in text
    assert '{"email": 1}' in text
    assert "Total missing indexes in source: 0" in text
    assert "Total missing indexes in target: 1" in text
    assert "Total divergent indexes: 1" in text


def test_json_output(calls, console):
    cli.main(["run", SOURCE_URL, TARGET_URL, "--format", "json"], console=console)

    data = json.loads(output(console))
    assert data["diff"]["missing_in_target"][0]["index_name"] == "email_1"
    assert data["source_index_count"] == 3


def test_urls_default_to_environment(calls, console, monkeypatch):
    monkeypatch.setenv("SOURCE_MONGO_URL", SOURCE_URL)
    monkeypatch.setenv("TARGET_MONGO_URL", TARGET_URL)

    cli.main(["run"], console=console)

    assert calls[0][:2] == (SOURCE_URL, TARGET_URL)


def test_options_reach_settings(calls, console):
    cli.main(
        [
            "run",
            SOURCE_URL,
            TARGET_URL,
            "--skip-missing-collections",
            "--include-system-collections",
            "--no-divergent",
            "--max-concurrency",
            "3",
            "--timeout-ms",
            "1500",
        ],
        console=console,
    )

    _, _, settings, skip_missing = calls[0]
    assert skip_missing is True
    assert settings.compare_include_system_collections is True
    assert settings.compare_detect_divergent is False
    assert settings.compare_max_concurrency == 3
    assert settings.mongo_timeout_ms == 1500


def test_fail_on_diff(calls, console):
    code = cli.main(["run", SOURCE_URL, TARGET_URL, "--fail-on-diff"], console=console)

    assert code == cli.EXIT_DIFFERENCES


def test_missing_urls_is_configuration_error(console):
    code = cli.main(["run"], console=console)

    assert code == cli.EXIT_CONFIGURATION


def test_invalid_option_value_is_configuration_error(calls, console):
    code = cli.main(["run", SOURCE_URL, TARGET_URL, "--max-concurrency", "0"], console=console)

    assert code == cli.EXIT_CONFIGURATION
    assert calls == []


def test_connectivity_error_exit_code(monkeypatch, console, caplog):
    async def failing(*args, **kwargs):
        raise ConnectivityError("Failed to connect to source MongoDB server: timed out")

    monkeypatch.setattr(cli, "compare_indexes", failing)

    code = cli.main(["run", SOURCE_URL, TARGET_URL], console=console)

    assert code == cli.EXIT_CONNECTIVITY
    assert "ensure the databases are accessible" in caplog.text


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert "mongo-compare-indexes" in capsys.readouterr().out
