"""
Configuration management for aawire.
"""
import os
import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional

import yaml
from dotenv import load_dotenv

from aawire.exceptions import InvalidConfiguration

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

API_BASE_URL = 'https://api.aa.com.tr'

DEFAULT_FILTERS = {
    'filter_language': '1',
    'filter_type': '1',
    'limit': '5',
}

# Default configuration
DEFAULT_CONFIG = {
    "api": {
        "url": API_BASE_URL,
        "username": "",
        "password": ""
    },
    "filters": dict(DEFAULT_FILTERS),
    "pacing": {
        "delay": 0.3,
        "timeout": 60
    },
    "summary": {
        "length": 150
    }
}

ENV_PREFIX = 'AAWIRE_'
ENV_SEPARATOR = '__'


class SearchFilters(Mapping):
    """
    Immutable set of search filter attributes sent to the search endpoint.

    Keys and values are forwarded verbatim. ``merge`` returns a new instance.
    """
    def __init__(self, values: Optional[Mapping] = None):
        self._values = MappingProxyType(dict(DEFAULT_FILTERS if values is None else values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SearchFilters({dict(self._values)!r})"

    def merge(self, overrides: Optional[Mapping] = None) -> "SearchFilters":
        """
        Merge filter overrides on top of these filters.

        Args:
            overrides: Filter key-value pairs; colliding keys win

        Returns:
            A new SearchFilters instance
        """
        merged = dict(self._values)
        merged.update(overrides or {})
        return SearchFilters(merged)

    def as_form(self) -> Dict[str, Any]:
        """Return the filters as a plain dict for a form-encoded request body."""
        return dict(self._values)


class Config:
    """
    Configuration manager for aawire.
    """
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the Config.

        Args:
            config_path: Path to a YAML or JSON configuration file
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            path = Path(self.config_path)
            if path.exists():
                self._update_dict(config, self._read_file(path))
            else:
                logger.warning(f"Config file {path} not found, using default configuration")

        # Override with environment variables
        self._override_from_env(config)

        return config

    def _read_file(self, path: Path) -> Dict:
        """
        Read a configuration file.

        Args:
            path: Path to a .yaml, .yml or .json file

        Returns:
            The file contents as a dictionary
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    user_config = yaml.safe_load(f)
                elif path.suffix.lower() == '.json':
                    user_config = json.load(f)
                else:
                    raise InvalidConfiguration(f"Unsupported config file format: {path.suffix}")
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise InvalidConfiguration(f"Error loading config from {path}: {e}") from e

        if user_config is None:
            return {}
        if not isinstance(user_config, dict):
            raise InvalidConfiguration(f"Config file {path} must contain a mapping")
        return user_config

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _override_from_env(self, config: Dict, prefix: str = ENV_PREFIX) -> None:
        """
        Override configuration with environment variables.

        ``AAWIRE_API__PASSWORD`` sets ``api.password``; nesting levels are
        separated by a double underscore.

        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for key, value in os.environ.items():
            if not key.startswith(prefix) or key == prefix + 'CONFIG_PATH':
                continue

            parts = key[len(prefix):].lower().split(ENV_SEPARATOR)

            current = config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            try:
                current[parts[-1]] = json.loads(value)
            except json.JSONDecodeError:
                current[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'api.url')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        current = self.config
        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def crawler_parameters(self) -> Dict[str, str]:
        """Credentials in the shape accepted by ``Crawler.set_parameters``."""
        return {
            'userName': str(self.get('api.username', '')),
            'password': str(self.get('api.password', '')),
        }

    def search_filters(self) -> SearchFilters:
        """Configured search filters layered over the defaults."""
        filters = self.get('filters', {})
        if not isinstance(filters, dict):
            raise InvalidConfiguration("'filters' must be a mapping")
        return SearchFilters().merge({key: str(value) for key, value in filters.items()})


_config: Optional[Config] = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a value from the global configuration, built from AAWIRE_CONFIG_PATH.

    Args:
        key: Dot-separated key path (e.g., 'pacing.delay')
        default: Default value if key not found

    Returns:
        Configuration value
    """
    global _config
    if _config is None:
        _config = Config(os.getenv('AAWIRE_CONFIG_PATH'))
    return _config.get(key, default)
