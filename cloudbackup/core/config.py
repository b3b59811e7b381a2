"""
Configuration Management.

Connection settings come from three places, highest precedence first:

    1. Command-line flags (--host, --access-key, --secret-key)
    2. Environment variables (BL_HOST, BL_ACCESS_KEY, BL_SECRET_KEY, BL_TIMEOUT)
    3. YAML config file (--config, default ~/.cloudbackup-cli.yaml)

The config file is validated against ConfigFileSchema. Logging settings
are read from the config file only.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudbackup.core.config_schema import ConfigFileSchema, LoggingSchema
from cloudbackup.core.exceptions import ConfigurationError
from cloudbackup.core.utils import mask_secret

CONFIG_FILE_NAME = ".cloudbackup-cli.yaml"


def default_config_path() -> Path:
    """Default config file location in the user's home directory."""
    return Path.home() / CONFIG_FILE_NAME


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file."""
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config_file(path: Path | None = None) -> ConfigFileSchema:
    """
    Load and validate the config file.

    Args:
        path: Explicit config file. If None, the default file is used
            when it exists and defaults apply when it does not.

    Raises:
        ConfigurationError: If an explicit file is missing, or the file
            is not valid YAML or does not match the schema
    """
    explicit = path is not None
    config_path = path if explicit else default_config_path()

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        return ConfigFileSchema()

    try:
        raw = load_yaml_config(config_path)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Invalid configuration in {config_path}: expected a mapping")

    try:
        return ConfigFileSchema(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n{e}") from e


class Settings(BaseSettings):
    """Connection settings and secrets read from BL_* environment variables."""

    host: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    timeout: float | None = Field(default=None, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="BL_",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached environment settings."""
    return Settings()


@dataclass(frozen=True)
class ResolvedConfig:
    """Effective configuration after merging flags, environment and file."""

    host: str
    access_key: str
    secret_key: str
    timeout: float
    logging: LoggingSchema
    config_path: Path | None = None

    def masked(self) -> dict[str, Any]:
        """Configuration safe for display: secret key masked."""
        return {
            "config_file": str(self.config_path) if self.config_path else None,
            "host": self.host,
            "access_key": self.access_key,
            "secret_key": mask_secret(self.secret_key) if self.secret_key else "",
            "timeout": self.timeout,
            "logging": self.logging.model_dump(),
        }


def _first_set(*values: str | None) -> str:
    for value in values:
        if value:
            return value
    return ""


def resolve_config(
    config_path: Path | None = None,
    host: str | None = None,
    access_key: str | None = None,
    secret_key: str | None = None,
) -> ResolvedConfig:
    """
    Merge command-line values, environment and config file.

    Empty values are treated as unset at every level.

    Raises:
        ConfigurationError: If the config file is unusable
    """
    file_config = load_config_file(config_path)
    try:
        env = get_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid BL_* environment settings:\n{e}") from e

    used_path = config_path
    if used_path is None and default_config_path().exists():
        used_path = default_config_path()

    return ResolvedConfig(
        host=_first_set(host, env.host, file_config.host),
        access_key=_first_set(access_key, env.access_key, file_config.access_key),
        secret_key=_first_set(secret_key, env.secret_key, file_config.secret_key),
        timeout=env.timeout if env.timeout else file_config.timeout,
        logging=file_config.logging,
        config_path=used_path,
    )
