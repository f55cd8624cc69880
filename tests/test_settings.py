# tests/test_settings.py
"""Tests for settings loading."""

import json

import pytest
from pydantic import ValidationError

from pow_quote.core.settings import Settings, load_settings


def test_defaults(monkeypatch):
    for name in ("SERVER_HOST", "SERVER_PORT", "HASHCASH_ZEROS_COUNT", "HASHCASH_DURATION"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.server_port == 3333
    assert settings.hashcash_zeros_count == 20
    assert settings.hashcash_duration == 300
    assert settings.hash_algorithm == "sha256"
    assert settings.address == "127.0.0.1:3333"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "4444")
    monkeypatch.setenv("HASHCASH_ZEROS_COUNT", "12")
    monkeypatch.setenv("HASH_ALGORITHM", "blake3")
    settings = Settings(_env_file=None)
    assert settings.server_port == 4444
    assert settings.hashcash_zeros_count == 12
    assert settings.hash_algorithm == "blake3"


def test_load_settings_from_json(tmp_path, monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "4444")
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps(
            {
                "ServerHost": "0.0.0.0",
                "ServerPort": 5555,
                "CacheHost": "ignored",
                "HashcashZerosCount": 3,
                "HashcashDuration": 30,
                "HashcashMaxIterations": 1000,
            }
        )
    )

    settings = load_settings(config)

    assert settings.server_host == "0.0.0.0"
    assert settings.server_port == 5555
    assert settings.hashcash_zeros_count == 3
    assert settings.hashcash_duration == 30
    assert settings.hashcash_max_iterations == 1000


def test_load_settings_missing_explicit_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.json")


def test_load_settings_without_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert isinstance(load_settings(), Settings)


def test_load_settings_rejects_non_object(tmp_path):
    config = tmp_path / "config.json"
    config.write_text("[1, 2]")
    with pytest.raises(ValueError, match="JSON object"):
        load_settings(config)


@pytest.mark.parametrize(
    "overrides",
    [
        {"hashcash_zeros_count": -1},
        {"hashcash_zeros_count": 257},
        {"hashcash_max_iterations": 0},
        {"hash_algorithm": "md5"},
        {"server_port": 70000},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
