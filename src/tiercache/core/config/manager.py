"""
Configuration Manager

Loads tier configuration with the precedence explicit overrides →
environment variables → configuration file → defaults, and builds the
configured MultiCache.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING

import yaml
from pydantic import ValidationError

from tiercache.core.config.models import CacheTierConfig
from tiercache.core.exceptions import ConfigurationError, ErrorCode, config_error

# TYPE_CHECKING to avoid circular imports with the store layer
if TYPE_CHECKING:
    from tiercache.core.cache.multi import MultiCache


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages cache tier configuration with hierarchical loading and validation.

    Configuration sources in order of precedence:
    1. Explicit overrides (highest priority)
    2. Environment variables
    3. Configuration file
    4. Default values (lowest priority)

    Overrides and environment variables hold memory store options and apply
    to every memory tier.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[CacheTierConfig] = None
        self._config_paths = self._get_default_config_paths()

    def _get_default_config_paths(self) -> List[Path]:
        """Get default configuration file search paths."""
        search_paths = [
            Path.cwd() / "tiercache.yaml",
            Path.cwd() / "tiercache.yml",
            Path.cwd() / ".tiercache.yaml",
            Path.home() / ".config" / "tiercache" / "config.yaml",
        ]

        xdg_config = os.environ.get('XDG_CONFIG_HOME')
        if xdg_config:
            search_paths.append(Path(xdg_config) / "tiercache" / "config.yaml")

        return search_paths

    def load_config(
        self,
        overrides: Optional[Dict[str, Any]] = None,
        env_prefix: str = "TIERCACHE_"
    ) -> CacheTierConfig:
        """
        Load and validate configuration from all sources.

        Args:
            overrides: Memory store options taking precedence over every other source
            env_prefix: Prefix for environment variables

        Returns:
            Validated CacheTierConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_data = self._load_config_file() or {}
        if not isinstance(config_data, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping",
                error_code=ErrorCode.CONFIG_INVALID_FORMAT
            )

        memory_options = self._load_env_config(env_prefix)
        if overrides:
            memory_options.update({k: v for k, v in overrides.items() if v is not None})

        if memory_options:
            tiers = config_data.get('tiers') or [{}]
            config_data['tiers'] = [
                self._apply_memory_options(tier, memory_options) for tier in tiers
            ]

        try:
            self._config = CacheTierConfig(**config_data)
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Configuration validation failed: {e}", cause=e)

        logger.info(f"Loaded cache configuration with {len(self._config.tiers)} tier(s)")
        return self._config

    @staticmethod
    def _apply_memory_options(tier: Any, options: Dict[str, Any]) -> Any:
        if not isinstance(tier, dict):
            return tier
        if str(tier.get('store', 'memory')).strip().lower() != 'memory':
            return tier
        merged = dict(tier)
        merged['options'] = {**(tier.get('options') or {}), **options}
        return merged

    def _load_config_file(self) -> Optional[Any]:
        """Load configuration from file."""
        config_file = self.config_file

        if config_file and not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}",
                error_code=ErrorCode.CONFIG_FILE_NOT_FOUND
            )

        if not config_file:
            for path in self._config_paths:
                if path.exists() and path.is_file():
                    config_file = path
                    break

        if not config_file:
            return None

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.suffix.lower() == '.json':
                    return json.load(f)
                return yaml.safe_load(f) or {}
        except (IOError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}",
                error_code=ErrorCode.CONFIG_INVALID_FORMAT,
                cause=e
            )

    def _load_env_config(self, prefix: str) -> Dict[str, Any]:
        """Load memory store options from environment variables."""
        env_config = {}

        env_mappings = {
            f"{prefix}MAX": ("max", int),
            f"{prefix}TTL": ("ttl", float),
            f"{prefix}CLONE_VALUES": ("clone_values", self._parse_bool),
        }

        for env_var, (key, parser) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                try:
                    env_config[key] = parser(value)
                except (ValueError, TypeError) as e:
                    raise config_error(
                        f"Invalid value for {env_var}: {value} ({e})",
                        key=env_var,
                        config_value=value,
                        cause=e
                    )

        return env_config

    @staticmethod
    def _parse_bool(value: Union[str, bool]) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {'true', '1', 'yes', 'on', 'enabled'}

    async def build(self) -> 'MultiCache':
        """
        Build a MultiCache with one Cache per configured tier.

        Loads configuration with defaults first if ``load_config`` has not
        been called.
        """
        from tiercache.core.cache.factory import caching, multi_caching

        config = self._config or self.load_config()
        caches = [await caching(tier.store, **tier.options) for tier in config.tiers]
        return multi_caching(caches)

    def generate_schema(self, output_file: Optional[Path] = None) -> Dict[str, Any]:
        """
        Generate JSON schema for configuration.

        Args:
            output_file: Optional file to write schema to

        Returns:
            JSON schema dictionary
        """
        schema = CacheTierConfig.model_json_schema()

        if output_file:
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(schema, f, indent=2)

        return schema

    @property
    def config(self) -> Optional[CacheTierConfig]:
        """Get the loaded configuration."""
        return self._config
