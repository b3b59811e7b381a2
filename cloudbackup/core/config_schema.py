"""
Configuration Schemas.

Pydantic models defining the expected structure of the YAML config file
(default ~/.cloudbackup-cli.yaml). Used by load_config_file to validate
configuration at load time. Missing keys fall back to defaults; wrong
types or unknown keys raise a clear error instead of failing later in
the middle of a request.

Example file:

    host: backups.example.com
    access_key: AKIAEXAMPLE
    secret_key: s3cr3t
    timeout: 10
    logging:
      level: WARNING
      format: console
      handlers:
        console:
          enabled: true
        file:
          enabled: false
          path: ~/.cloudbackup-cli/logs/cli.jsonl
          max_bytes: 5242880
          backup_count: 3
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIMEOUT_SECONDS = 10.0


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# logging
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool = True


class FileHandlerSchema(_StrictBase):
    enabled: bool = False
    path: str = "~/.cloudbackup-cli/logs/cli.jsonl"
    max_bytes: int = Field(default=5_242_880, gt=0)
    backup_count: int = Field(default=3, ge=0)


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema = Field(default_factory=ConsoleHandlerSchema)
    file: FileHandlerSchema = Field(default_factory=FileHandlerSchema)


class LoggingSchema(_StrictBase):
    level: str = "WARNING"
    format: Literal["json", "console"] = "console"
    handlers: HandlersSchema = Field(default_factory=HandlersSchema)


# =============================================================================
# config file
# =============================================================================


class ConfigFileSchema(_StrictBase):
    host: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    logging: LoggingSchema = Field(default_factory=LoggingSchema)
