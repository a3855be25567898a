"""
Configuration Manager

Handles hierarchical configuration loading and validation with support for
CLI args → environment variables → config files → defaults.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from tuskfish.core.config.models import AppConfig, DatabaseConfig, SiteConfig
from tuskfish.core.exceptions import ConfigurationError, ErrorCode


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages application configuration with hierarchical loading and validation.

    Configuration sources in order of precedence:
    1. CLI arguments (highest priority)
    2. Environment variables
    3. Configuration files
    4. Default values (lowest priority)
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None
        self._config_paths = self._get_default_config_paths()

    def _get_default_config_paths(self) -> List[Path]:
        """Get default configuration file search paths."""
        search_paths = [
            Path.cwd() / "tuskfish.yaml",
            Path.cwd() / "tuskfish.yml",
            Path.cwd() / ".tuskfish.yaml",
            Path.home() / ".config" / "tuskfish" / "config.yaml",
        ]

        xdg_config = os.environ.get('XDG_CONFIG_HOME')
        if xdg_config:
            search_paths.append(Path(xdg_config) / "tuskfish" / "config.yaml")

        return search_paths

    def load_config(
        self,
        cli_args: Optional[Dict[str, Any]] = None,
        env_prefix: str = "TUSKFISH_"
    ) -> AppConfig:
        """
        Load and validate configuration from all sources.

        Args:
            cli_args: Dictionary of CLI arguments
            env_prefix: Prefix for environment variables

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_config_file()
        if file_config:
            config_data.update(file_config)

        env_config = self._load_env_config(env_prefix)
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        if cli_args:
            cli_config = self._normalize_cli_args(cli_args)
            config_data = self._deep_merge(config_data, cli_config)

        try:
            self._config = AppConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e}",
                error_code=ErrorCode.CONFIG_INVALID_VALUE,
                cause=e,
            )

        logger.debug("Configuration loaded (database: %s)", self._config.database.path)
        return self._config

    def _load_config_file(self) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        config_file = self.config_file

        if config_file and not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}",
                error_code=ErrorCode.CONFIG_FILE_NOT_FOUND,
                config_key='config_file',
                config_value=str(config_file),
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
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config file {config_file}: {e}", cause=e)

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_file} must contain a mapping")

        logger.debug("Read configuration file %s", config_file)
        return data

    def _load_env_config(self, prefix: str) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        env_mappings = {
            f"{prefix}DB_PATH": ("database", "path", str),
            f"{prefix}DB_TIMEOUT": ("database", "timeout", float),
            f"{prefix}DB_JOURNAL_MODE": ("database", "journal_mode", str),
            f"{prefix}SITE_NAME": ("site", "site_name", str),
            f"{prefix}USER_PAGINATION": ("site", "user_pagination", int),
            f"{prefix}ADMIN_PAGINATION": ("site", "admin_pagination", int),
            f"{prefix}SEARCH_PAGINATION": ("site", "search_pagination", int),
            f"{prefix}MIN_SEARCH_LENGTH": ("site", "min_search_length", int),
            f"{prefix}LOG_LEVEL": ("logging", "level", str),
            f"{prefix}VERBOSE": ("verbose", None, self._parse_bool),
            f"{prefix}DEBUG": ("debug", None, self._parse_bool),
        }

        for env_var, (section, key, parser) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            try:
                parsed_value = parser(value)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {value} ({e})",
                    error_code=ErrorCode.CONFIG_INVALID_VALUE,
                    config_key=env_var,
                    config_value=value,
                )
            if key is None:
                env_config[section] = parsed_value
            else:
                env_config.setdefault(section, {})[key] = parsed_value

        return env_config

    def _normalize_cli_args(self, cli_args: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize CLI arguments to configuration structure."""
        normalized: Dict[str, Any] = {}

        cli_mappings = {
            'verbose': 'verbose',
            'debug': 'debug',
            'db': ('database', 'path'),
            'database': ('database', 'path'),
            'log_level': ('logging', 'level'),
            'pagination': ('site', 'user_pagination'),
            'min_search_length': ('site', 'min_search_length'),
        }

        for cli_key, value in cli_args.items():
            if value is None:
                continue

            mapping = cli_mappings.get(cli_key)
            if not mapping:
                continue
            if isinstance(mapping, tuple):
                section, key = mapping
                normalized.setdefault(section, {})[key] = value
            else:
                normalized[mapping] = value

        return normalized

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _parse_bool(value: Union[str, bool]) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        return str(value).lower() in {'true', '1', 'yes', 'on', 'enabled'}

    def validate_config(self, config: Optional[AppConfig] = None) -> List[str]:
        """
        Validate configuration and return a list of warnings.

        Args:
            config: Configuration to validate (uses loaded config if None)

        Returns:
            List of validation warnings
        """
        if config is None:
            config = self._config

        if config is None:
            return ["No configuration loaded"]

        warnings = []

        db_path = config.database.path
        if str(db_path) != ':memory:' and not db_path.parent.exists():
            warnings.append(f"Database directory does not exist: {db_path.parent}")

        if config.site.default_language not in config.site.languages:
            warnings.append(
                f"Default language '{config.site.default_language}' is not in the language list"
            )

        if config.site.search_pagination < config.site.user_pagination:
            warnings.append("search_pagination is smaller than user_pagination")

        return warnings

    def create_example_config(self, output_file: Path, profile: str = "default") -> None:
        """
        Create example configuration file.

        Args:
            output_file: Path to write configuration file
            profile: Configuration profile (default, memory)
        """
        if profile == "memory":
            config = AppConfig(
                database=DatabaseConfig(path=Path(":memory:"), journal_mode="MEMORY"),
                site=SiteConfig(user_pagination=5),
            )
        else:
            config = AppConfig()

        # mode='json' serialises Path objects as strings
        config_dict = config.model_dump(mode='json')

        with open(output_file, 'w', encoding='utf-8') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    @property
    def config(self) -> Optional[AppConfig]:
        """Get the loaded configuration."""
        return self._config
