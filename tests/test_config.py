"""
Unit tests for configuration module.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import os
from unittest.mock import patch

import yaml

from preoccupied.gitpublish.config import (
    GlobalConfig, ProviderConfig, RootConfig,
    get_config, _config_from_env
)


def write_config(temp_dir, data):
    path = os.path.join(temp_dir, 'config.yaml')
    with open(path, 'w') as f:
        yaml.safe_dump(data, f)
    return path


class TestGlobalConfig:
    """
    Tests for GlobalConfig model.
    """

    def test_global_config_defaults(self):
        config = GlobalConfig()
        assert config.enabled is True
        assert config.api_url == 'https://api.github.com'
        assert config.noreply_host == 'github.com'
        assert config.webhook_url is None
        assert config.webhook_secret is None
        assert config.api_secret is None
        assert config.work_dir is None

    def test_enabled_from_string(self):
        """
        Environment style strings are coerced to booleans.
        """

        assert GlobalConfig(enabled='false').enabled is False
        assert GlobalConfig(enabled='1').enabled is True


class TestRootConfig:
    """
    Tests for RootConfig model.
    """

    def test_root_config_from_mapping(self):
        config = RootConfig.model_validate({
            'global': {'webhook_url': 'https://ci.example.com/hook'},
            'providers': {'github': {'token': 'ghp_abc'}},
        })

        assert config.global_.webhook_url == 'https://ci.example.com/hook'
        assert config.providers['github'] == ProviderConfig(token='ghp_abc')

    def test_root_config_empty_sections(self):
        """
        Sections left empty in YAML parse as None and are treated as absent.
        """

        config = RootConfig.model_validate(yaml.safe_load('global:\nproviders:\n  github:\n'))

        assert config.global_ == GlobalConfig()
        assert config.providers == {'github': ProviderConfig()}


class TestConfigFromEnv:
    """
    Tests for _config_from_env function.
    """

    def test_config_from_env_empty(self, mock_env_vars):
        assert _config_from_env() == {'global': {}}

    def test_config_from_env_global_vars(self, mock_env_vars):
        mock_env_vars.setenv('GITPUBLISH_WEBHOOK_URL', 'https://ci.example.com/hook')
        mock_env_vars.setenv('GITPUBLISH_NOREPLY_HOST', 'ghe.example.com')
        mock_env_vars.setenv('GITPUBLISH_ENABLED', 'false')

        config = _config_from_env()

        assert config['global'] == {
            'webhook_url': 'https://ci.example.com/hook',
            'noreply_host': 'ghe.example.com',
            'enabled': 'false',
        }
        assert 'providers' not in config

    def test_config_from_env_github_vars(self, mock_env_vars):
        mock_env_vars.setenv('GITPUBLISH_GITHUB_APP_ID', '12345')
        mock_env_vars.setenv('GITPUBLISH_GITHUB_INSTALLATION_ID', '67890')
        mock_env_vars.setenv('GITPUBLISH_GITHUB_KEYFILE', '/path/to/key.pem')

        config = _config_from_env()

        assert config['providers'] == {
            'github': {
                'app_id': '12345',
                'installation_id': '67890',
                'keyfile': '/path/to/key.pem',
            }
        }


class TestGetConfig:
    """
    Tests for get_config function.
    """

    def test_get_config_from_env_only(self, mock_env_vars, temp_dir):
        mock_env_vars.setenv('GITPUBLISH_GITHUB_TOKEN', 'ghp_env')

        with patch('preoccupied.gitpublish.config.CONFIG_PATH', os.path.join(temp_dir, 'missing.yaml')):
            config = get_config()

        assert config.providers['github'].token == 'ghp_env'
        assert config.global_ == GlobalConfig()

    def test_get_config_from_file(self, mock_env_vars, temp_dir):
        path = write_config(temp_dir, {
            'global': {
                'webhook_url': 'https://ci.example.com/hook',
                'api_secret': 't0ken',
            },
            'providers': {
                'github': {'token_file': '/run/secrets/github'},
            },
        })

        with patch('preoccupied.gitpublish.config.CONFIG_PATH', path):
            config = get_config()

        assert config.global_.webhook_url == 'https://ci.example.com/hook'
        assert config.global_.api_secret == 't0ken'
        assert config.providers['github'].token_file == '/run/secrets/github'

    def test_get_config_env_overrides_file(self, mock_env_vars, temp_dir):
        path = write_config(temp_dir, {
            'global': {'webhook_url': 'https://file.example.com/hook'},
            'providers': {'github': {'token': 'ghp_file', 'token_file': '/run/secrets/github'}},
        })
        mock_env_vars.setenv('GITPUBLISH_WEBHOOK_URL', 'https://env.example.com/hook')
        mock_env_vars.setenv('GITPUBLISH_GITHUB_TOKEN', 'ghp_env')

        with patch('preoccupied.gitpublish.config.CONFIG_PATH', path):
            config = get_config()

        assert config.global_.webhook_url == 'https://env.example.com/hook'
        assert config.providers['github'].token == 'ghp_env'
        assert config.providers['github'].token_file == '/run/secrets/github'

    def test_get_config_empty_file(self, mock_env_vars, temp_dir):
        path = os.path.join(temp_dir, 'config.yaml')
        open(path, 'w').close()

        with patch('preoccupied.gitpublish.config.CONFIG_PATH', path):
            config = get_config()

        assert config.providers == {}

    def test_get_config_caches_result(self, mock_env_vars, temp_dir):
        with patch('preoccupied.gitpublish.config.CONFIG_PATH', os.path.join(temp_dir, 'missing.yaml')):
            config1 = get_config()
            config2 = get_config()

        assert config1 is config2


# The end.
