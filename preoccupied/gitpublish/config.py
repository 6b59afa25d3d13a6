"""
Configuration models and loading for the gitpublish application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .github import DEFAULT_API_URL


logger = logging.getLogger(__name__)


CONFIG_PATH = os.environ.get('CONFIG_PATH', '/config/config.yaml')


_config: Optional['RootConfig'] = None


class GlobalConfig(BaseModel):
    """
    Global configuration settings
    """

    enabled: bool = True
    api_url: str = DEFAULT_API_URL
    noreply_host: str = 'github.com'

    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None

    api_secret: Optional[str] = None
    work_dir: Optional[str] = None


class ProviderConfig(BaseModel):
    """
    Credential sources for a single token provider
    """

    token: Optional[str] = None
    token_file: Optional[str] = None

    app_id: Optional[str] = None
    installation_id: Optional[str] = None
    keyfile: Optional[str] = None


class RootConfig(BaseModel):
    """
    Root configuration model
    """

    global_: GlobalConfig = Field(alias='global', default_factory=GlobalConfig)
    providers: Dict[str, ProviderConfig] = Field(default_factory=dict)

    model_config = {'populate_by_name': True}


    @model_validator(mode='before')
    def drop_empty_sections(cls, v: Any) -> Any:
        """
        Treat sections left empty in YAML (parsed as None) as absent.
        """

        if not isinstance(v, dict):
            return v

        fixed = dict(v)
        for key in ('global', 'global_', 'providers'):
            if key in fixed and fixed[key] is None:
                del fixed[key]

        providers = fixed.get('providers')
        if providers:
            fixed['providers'] = {name: (prov or {}) for name, prov in providers.items()}

        return fixed


def _config_from_env() -> Dict[str, Any]:
    """
    Build configuration dictionary from GITPUBLISH_* environment variables.
    """

    global_config = {}
    pairs = (
        ('GITPUBLISH_ENABLED', 'enabled'),
        ('GITPUBLISH_API_URL', 'api_url'),
        ('GITPUBLISH_NOREPLY_HOST', 'noreply_host'),
        ('GITPUBLISH_WEBHOOK_URL', 'webhook_url'),
        ('GITPUBLISH_WEBHOOK_SECRET', 'webhook_secret'),
        ('GITPUBLISH_API_SECRET', 'api_secret'),
        ('GITPUBLISH_WORK_DIR', 'work_dir'))

    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            global_config[config_key] = value

    github_config = {}
    pairs = (
        ('GITPUBLISH_GITHUB_TOKEN', 'token'),
        ('GITPUBLISH_GITHUB_TOKEN_FILE', 'token_file'),
        ('GITPUBLISH_GITHUB_APP_ID', 'app_id'),
        ('GITPUBLISH_GITHUB_INSTALLATION_ID', 'installation_id'),
        ('GITPUBLISH_GITHUB_KEYFILE', 'keyfile'))

    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            github_config[config_key] = value

    result = {'global': global_config}
    if github_config:
        result['providers'] = {'github': github_config}
    return result


def get_config() -> RootConfig:
    """
    Get the global config object.
    """

    global _config

    if _config is None:
        env_config = _config_from_env()

        if os.path.exists(CONFIG_PATH):
            with open(CONFIG_PATH, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            glbl = config_data.get('global') or {}
            glbl.update(env_config['global'])
            config_data['global'] = glbl

            providers = config_data.get('providers') or {}
            for name, env_prov in env_config.get('providers', {}).items():
                prov = providers.get(name) or {}
                prov.update(env_prov)
                providers[name] = prov
            config_data['providers'] = providers

        else:
            config_data = env_config

        _config = RootConfig.model_validate(config_data)
        logger.info(f'Loaded configuration with {len(_config.providers)} token providers')

    return _config


def reset_config() -> None:
    """
    Forget the cached configuration so the next get_config() reloads it.
    """

    global _config
    _config = None


# The end.
