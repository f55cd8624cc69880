"""Application settings and configuration.

This module defines all configuration options for the pow-quote server and
client. Settings are loaded from environment variables (or an ``.env`` file)
with sensible defaults, and may be overridden by a JSON config file that uses
the keys of ``config/config.json``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

HashAlgorithm = Literal["sha256", "blake3"]

DEFAULT_CONFIG_PATH = Path("config") / "config.json"


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Fields accept either the environment variable name (``SERVER_PORT``) or
    the JSON config key (``ServerPort``).
    """

    # Network
    server_host: str = Field(
        default="127.0.0.1",
        validation_alias=AliasChoices("SERVER_HOST", "ServerHost"),
    )
    server_port: int = Field(
        default=3333,
        ge=0,
        le=65535,
        validation_alias=AliasChoices("SERVER_PORT", "ServerPort"),
    )

    # Proof-of-Work (server side): leading zero bits and challenge lifetime
    hashcash_zeros_count: int = Field(
        default=20,
        ge=0,
        le=256,
        validation_alias=AliasChoices("HASHCASH_ZEROS_COUNT", "HashcashZerosCount"),
    )
    hashcash_duration: int = Field(
        default=300,
        ge=0,
        validation_alias=AliasChoices("HASHCASH_DURATION", "HashcashDuration"),
    )
    hash_algorithm: HashAlgorithm = Field(
        default="sha256",
        validation_alias=AliasChoices("HASH_ALGORITHM", "HashAlgorithm"),
    )

    # Proof-of-Work (client side): upper bound on the counter search
    hashcash_max_iterations: int = Field(
        default=10_000_000,
        gt=0,
        validation_alias=AliasChoices("HASHCASH_MAX_ITERATIONS", "HashcashMaxIterations"),
    )

    # Nonce store memory hygiene
    nonce_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        validation_alias=AliasChoices("NONCE_TTL_SECONDS", "NonceTtlSeconds"),
    )
    nonce_cleanup_interval: float = Field(
        default=600.0,
        gt=0,
        validation_alias=AliasChoices("NONCE_CLEANUP_INTERVAL", "NonceCleanupInterval"),
    )

    # Client cadence
    client_request_interval: float = Field(
        default=5.0,
        ge=0,
        validation_alias=AliasChoices("CLIENT_REQUEST_INTERVAL", "ClientRequestInterval"),
    )
    client_retry_delay: float = Field(
        default=5.0,
        ge=0,
        validation_alias=AliasChoices("CLIENT_RETRY_DELAY", "ClientRetryDelay"),
    )

    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "LogLevel"))

    model_config = SettingsConfigDict(
        env_file=".env",
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def address(self) -> str:
        """Return the ``host:port`` pair the server listens on."""
        return f"{self.server_host}:{self.server_port}"


def load_settings(path: str | Path | None = None) -> Settings:
    """Build settings from the environment, then apply a JSON config file.

    Args:
        path: JSON file to read. When omitted, ``config/config.json`` is used
            if it exists and silently skipped otherwise.

    Returns:
        The merged settings; JSON values win over environment values.

    Raises:
        FileNotFoundError: If ``path`` was given explicitly and does not exist.
        ValueError: If the file is not a JSON object.
    """
    if path is None:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.is_file():
            return Settings()
    else:
        config_path = Path(path)

    data: Any = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    # model_validate skips the env sources, so file values cannot be shadowed.
    return Settings.model_validate({**Settings().model_dump(), **data})


settings = Settings()
