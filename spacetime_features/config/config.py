"""Configuration manager with YAML override support."""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from . import defaults
from ..exceptions import ConfigurationError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)


class Config:
    """Configuration manager with YAML override support."""

    def __init__(self, config_file: Optional[Path] = None):
        self.settings = self.load_defaults()

        if config_file is not None:
            config_file = Path(config_file)
            if not config_file.exists():
                raise ConfigurationError(f"Config file not found: {config_file}")
            self._load_yaml_config(config_file)
        elif self._is_test_mode():
            logger.debug("Test mode detected - ignoring discovered config.yml")
        else:
            discovered = self._find_config_file()
            if discovered:
                self._load_yaml_config(discovered)
            else:
                logger.debug("No config.yml found - using defaults only")

    def _find_config_file(self) -> Optional[Path]:
        """Find config.yml in the standard locations."""
        potential_locations = [
            Path.cwd() / 'config.yml',
            Path(defaults.PROJECT_ROOT) / 'config.yml',
            Path.home() / '.spacetime_features' / 'config.yml',
        ]

        for location in potential_locations:
            if location.exists() and location.is_file():
                return location

        return None

    def _is_test_mode(self) -> bool:
        """Detect if we're running under pytest or a forced test mode."""
        return (
            os.environ.get('FORCE_TEST_MODE', 'false').lower() == 'true' or
            os.environ.get('PYTEST_CURRENT_TEST') is not None
        )

    def load_defaults(self) -> Dict[str, Any]:
        """Load default configuration settings."""
        return {
            'paths': copy.deepcopy(defaults.PATHS),
            'grid': copy.deepcopy(defaults.GRID),
            'features': copy.deepcopy(defaults.FEATURES),
            'ingestion': copy.deepcopy(defaults.INGESTION),
            'output': copy.deepcopy(defaults.OUTPUT),
            'logging': copy.deepcopy(defaults.LOGGING)
        }

    def _load_yaml_config(self, config_file: Path):
        """Load and merge configuration from a YAML file."""
        try:
            with open(config_file, 'r') as file:
                yaml_config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}", e)

        if yaml_config is None:
            return
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"Top level of {config_file} must be a mapping")

        self._deep_merge(self.settings, yaml_config)
        logger.info(f"Loaded configuration from {config_file}")

    def _deep_merge(self, base: dict, override: dict):
        """Deep merge override into base dictionary."""
        for key, value in override.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def update(self, overrides: Dict[str, Any]):
        """Deep merge a dict of overrides, e.g. from command-line flags."""
        self._deep_merge(self.settings, overrides)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        value = self.settings

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    @property
    def paths(self) -> Dict[str, Any]:
        return self.settings['paths']

    @property
    def grid(self) -> Dict[str, Any]:
        return self.settings['grid']

    @property
    def features(self) -> Dict[str, Any]:
        return self.settings['features']

    @property
    def ingestion(self) -> Dict[str, Any]:
        return self.settings['ingestion']

    @property
    def output(self) -> Dict[str, Any]:
        return self.settings['output']

    @property
    def logging(self) -> Dict[str, Any]:
        return self.settings['logging']


# Global configuration instance
config = Config()
