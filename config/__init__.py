"""
Initializes the config package.

The config package is responsible for loading and managing the environment configuration of
engine client sessions, making it accessible throughout the application.
"""

# This import is done to facilitate cleaner imports in the project
# `from config import EnvConfig` instead of `from config.env import EnvConfig`
from .env import Config, EngineClientDefaults, EnvConfig, LoggingConfig, create_default_config

__all__ = ["Config", "EngineClientDefaults", "EnvConfig", "LoggingConfig", "create_default_config"]
