"""Shared fixtures."""

import pytest

from ycnbot.config import Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep host environment variables and .env files out of Settings."""
    for name, field in Settings.model_fields.items():
        for key in (name, field.alias):
            if key:
                monkeypatch.delenv(key, raising=False)
                monkeypatch.delenv(key.upper(), raising=False)
    monkeypatch.chdir(tmp_path)
