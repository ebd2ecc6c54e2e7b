#!/usr/bin/env python3
"""
Shared pytest configuration.

Every test gets a fresh Settings singleton backed by a temporary file, with
the database path pointed into the test's temporary directory and no
Anthropic credentials in the environment.
"""

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Fresh Settings singleton per test."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    Settings._instance = None
    settings = Settings(tmp_path / "settings.json")
    settings.create("history.database_path", default=str(tmp_path / "advisor.db"))

    yield settings

    Settings._instance = None
