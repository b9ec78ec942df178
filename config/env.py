"""
A module for exposing the environment configuration of engine client sessions.

This module loads, parses and validates the configuration from the `env.yaml` file. It uses
Pydantic to ensure that the configuration adheres to expected formats and types.

Functions:
- create_default_config: Writes a default configuration file if it doesn't exist.

Classes:
- EngineClientDefaults: Endpoint, secret and timeout defaults for engine clients.
- LoggingConfig: Log level and optional log file.
- Config: Represents the overall configuration structure with validation.
- EnvConfig: Loads the configuration and exposes it as Python objects.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from pytest_plugins.logging import LogLevel, configure_logging

ENV_PATH = Path(__file__).resolve().parent.parent / "env.yaml"


class EngineClientDefaults(BaseModel):
    """
    Defaults applied to every engine client created from this configuration.

    Attributes:
    - engine_port (int): Port of the authenticated engine endpoint.
    - eth_port (int): Port of the general eth endpoint.
    - jwt_secret (str | None): Hex encoded JWT secret; the hive default is used when unset.
    - rpc_timeout (float): Seconds allowed for each lookup made on behalf of a test.

    """

    engine_port: int = 8551
    eth_port: int = 8545
    jwt_secret: str | None = None
    rpc_timeout: float = 10.0


class LoggingConfig(BaseModel):
    """
    Logging settings for scripts that drive engine clients outside pytest.

    Attributes:
    - level (str): Level name or number, e.g. `INFO` or `VERBOSE`.
    - file (Path | None): Optional log file.

    """

    level: str = "INFO"
    file: Path | None = None

    @field_validator("level")
    @classmethod
    def check_level(cls, value: str) -> str:
        """Reject levels the logging module does not know."""
        LogLevel.from_cli(value)
        return value


class Config(BaseModel):
    """Represents the overall environment configuration."""

    engine_client: EngineClientDefaults = EngineClientDefaults()
    logging: LoggingConfig = LoggingConfig()

    def configure_logging(self) -> None:
        """Configure the root logger with the level and file of this configuration."""
        configure_logging(log_level=self.logging.level, log_file=self.logging.file)


class EnvConfig(Config):
    """
    Loads and validates environment configuration from `env.yaml`.

    This is a wrapper class for the Config model. It reads a config file from disk into a
    Config model and then exposes it.
    """

    def __init__(self, path: Path = ENV_PATH):
        """Init for the EnvConfig class."""
        if not path.exists():
            raise FileNotFoundError(
                f"The configuration file '{path}' does not exist. "
                "Call `create_default_config` to create it."
            )

        with path.open("r") as file:
            config_data = yaml.safe_load(file) or {}
        try:
            super().__init__(**config_data)
        except (ValidationError, TypeError) as e:
            raise ValueError(f"Invalid configuration: {e}") from e


def create_default_config(path: Path = ENV_PATH) -> Path:
    """Write the default configuration to `path` unless a file already exists there."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as file:
            yaml.safe_dump(Config().model_dump(mode="json"), file, sort_keys=False)
    return path
