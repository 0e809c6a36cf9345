"""Configuration tooling for the SuperFacts news site."""

from .config_manager import ConfigError, load_config, save_config
from .config_schema import DEFAULT_CONFIG, Config

__all__ = ["Config", "ConfigError", "DEFAULT_CONFIG", "load_config", "save_config"]
