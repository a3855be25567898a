"""
Tests for Configuration Manager

Tests hierarchical loading (CLI args, environment, files, defaults),
validation warnings and example config generation.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from tuskfish.core.config.manager import ConfigManager
from tuskfish.core.config.models import AppConfig
from tuskfish.core.exceptions import ConfigurationError, ErrorCode


class TestConfigManager:
    """Test ConfigManager basic functionality."""

    def test_init_default(self):
        manager = ConfigManager()
        assert manager.config_file is None
        assert manager.config is None
        assert len(manager._config_paths) > 0

    def test_load_config_defaults_only(self):
        manager = ConfigManager()

        with patch.object(manager, '_load_config_file', return_value=None):
            with patch.object(manager, '_load_env_config', return_value={}):
                config = manager.load_config()

        assert isinstance(config, AppConfig)
        assert config.database.path == Path("tuskfish.db")
        assert config.site.search_pagination == 20
        assert manager.config is config

    def test_load_config_with_cli_args(self):
        manager = ConfigManager()
        cli_args = {'db': '/tmp/site.db', 'debug': True, 'min_search_length': 4, 'unknown': 1}

        with patch.object(manager, '_load_config_file', return_value=None):
            with patch.object(manager, '_load_env_config', return_value={}):
                config = manager.load_config(cli_args=cli_args)

        assert config.database.path == Path('/tmp/site.db')
        assert config.debug is True
        assert config.get_log_level() == "DEBUG"
        assert config.site.min_search_length == 4


class TestConfigFileLoading:
    """Test configuration file loading."""

    def test_load_yaml_config_file(self, tmp_path):
        config_file = tmp_path / "tuskfish.yaml"
        config_file.write_text(yaml.dump({'site': {'site_name': 'Reef', 'search_pagination': 50}}))

        with patch.dict(os.environ, {}, clear=True):
            config = ConfigManager(config_file).load_config()

        assert config.site.site_name == 'Reef'
        assert config.site.search_pagination == 50

    def test_load_json_config_file(self, tmp_path):
        config_file = tmp_path / "tuskfish.json"
        config_file.write_text(json.dumps({'database': {'path': 'content.db'}}))

        with patch.dict(os.environ, {}, clear=True):
            config = ConfigManager(config_file).load_config()

        assert config.database.path == Path('content.db')

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(tmp_path / "missing.yaml").load_config()
        assert exc_info.value.error_code == ErrorCode.CONFIG_FILE_NOT_FOUND
        assert exc_info.value.suggestions[0].command == "tuskfish config init"

    def test_config_file_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "tuskfish.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            ConfigManager(config_file).load_config()

    def test_invalid_values(self, tmp_path):
        config_file = tmp_path / "tuskfish.yaml"
        config_file.write_text(yaml.dump({'site': {'search_pagination': 0}}))

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigManager(config_file).load_config()

        assert exc_info.value.error_code == ErrorCode.CONFIG_INVALID_VALUE

    def test_search_default_config_paths(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "tuskfish.yaml").write_text(yaml.dump({'site': {'site_name': 'Found'}}))

        with patch.dict(os.environ, {}, clear=True):
            config = ConfigManager().load_config()

        assert config.site.site_name == 'Found'


class TestEnvironmentConfig:
    """Test environment variable handling and precedence."""

    def test_load_env_config(self):
        env_vars = {
            'TUSKFISH_DB_PATH': '/data/site.db',
            'TUSKFISH_SEARCH_PAGINATION': '15',
            'TUSKFISH_DEBUG': 'yes',
        }
        with patch.dict(os.environ, env_vars, clear=True):
            env_config = ConfigManager()._load_env_config('TUSKFISH_')

        assert env_config == {
            'database': {'path': '/data/site.db'},
            'site': {'search_pagination': 15},
            'debug': True,
        }

    def test_env_config_error_handling(self):
        with patch.dict(os.environ, {'TUSKFISH_DB_TIMEOUT': 'soon'}, clear=True):
            with pytest.raises(ConfigurationError):
                ConfigManager()._load_env_config('TUSKFISH_')

    @pytest.mark.parametrize("value,expected", [
        ('true', True), ('1', True), ('on', True), ('false', False), ('0', False), (True, True),
    ])
    def test_parse_bool_values(self, value, expected):
        assert ConfigManager._parse_bool(value) is expected

    def test_configuration_precedence(self, tmp_path):
        config_file = tmp_path / "tuskfish.yaml"
        config_file.write_text(yaml.dump({
            'database': {'path': 'file.db'},
            'site': {'site_name': 'File', 'min_search_length': 5},
        }))
        manager = ConfigManager(config_file)

        with patch.dict(os.environ, {'TUSKFISH_DB_PATH': 'env.db', 'TUSKFISH_SITE_NAME': 'Env'},
                        clear=True):
            config = manager.load_config(cli_args={'db': 'cli.db'})

        assert config.database.path == Path('cli.db')
        assert config.site.site_name == 'Env'
        assert config.site.min_search_length == 5

    def test_deep_merge(self):
        merged = ConfigManager()._deep_merge(
            {'site': {'site_name': 'A', 'user_pagination': 10}, 'debug': False},
            {'site': {'site_name': 'B'}, 'debug': True},
        )
        assert merged == {'site': {'site_name': 'B', 'user_pagination': 10}, 'debug': True}


class TestValidationAndExamples:
    """Test config warnings and example files."""

    def test_validate_without_config(self):
        assert ConfigManager().validate_config() == ["No configuration loaded"]

    def test_validate_warnings(self, tmp_path):
        config = AppConfig(
            database={'path': tmp_path / "missing" / "site.db"},
            site={'default_language': 'fr', 'search_pagination': 5, 'user_pagination': 10},
        )
        warnings = ConfigManager().validate_config(config)
        assert len(warnings) == 3

    def test_validate_clean_config(self, tmp_path):
        config = AppConfig(database={'path': tmp_path / "site.db"})
        assert ConfigManager().validate_config(config) == []

    def test_create_example_config_default(self, tmp_path):
        output = tmp_path / "tuskfish.yaml"
        ConfigManager().create_example_config(output)

        data = yaml.safe_load(output.read_text())
        assert data['database']['path'] == 'tuskfish.db'
        assert data['site']['min_search_length'] == 3

    def test_create_example_config_memory_profile(self, tmp_path):
        output = tmp_path / "tuskfish.yaml"
        ConfigManager().create_example_config(output, profile="memory")

        with patch.dict(os.environ, {}, clear=True):
            config = ConfigManager(output).load_config()

        assert str(config.database.path) == ':memory:'
        assert config.database.journal_mode == 'MEMORY'
