#!/usr/bin/env python3
"""
Tests for the process entry point
"""

import pytest

import migrate
from services.errors import ConfigurationError, ListError


def test_main_exits_non_zero_on_fatal_error(monkeypatch, caplog):
    def broken_config():
        raise ConfigurationError("Invalid migration settings: gcs_bucket missing")

    monkeypatch.setattr(migrate, "load_config", broken_config)

    with pytest.raises(SystemExit) as exc:
        migrate.main()

    assert exc.value.code == 1
    assert "An overall error occurred" in caplog.text


def test_main_runs_migration(monkeypatch, config):
    calls = []

    async def fake_run(cfg):
        calls.append(cfg)

    monkeypatch.setattr(migrate, "load_config", lambda: config)
    monkeypatch.setattr(migrate, "run_migration", fake_run)

    migrate.main()

    assert calls == [config]


def test_main_reports_listing_failure(monkeypatch, config):
    async def failing_run(cfg):
        raise ListError("GCS", "root/", RuntimeError("403"))

    monkeypatch.setattr(migrate, "load_config", lambda: config)
    monkeypatch.setattr(migrate, "run_migration", failing_run)

    with pytest.raises(SystemExit):
        migrate.main()
