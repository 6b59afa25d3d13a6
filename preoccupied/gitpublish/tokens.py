"""
Provider credential resolution for the gitpublish application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
from enum import Enum

from .config import RootConfig
from .errors import TokenError
from .github import TokenSource, github_installation_token


logger = logging.getLogger(__name__)


class TokenProvider(str, Enum):
    """
    Named identifiers of the secret providers we can fetch tokens for
    """

    GITHUB = 'github'


async def fetch_provider_token(provider: TokenProvider, config: RootConfig) -> str:
    """
    Resolve the token for the named provider. A literal token wins over
    a token file, which wins over GitHub App installation credentials.
    """

    prov = config.providers.get(provider.value)
    if prov is None:
        raise TokenError(f"No credentials configured for provider '{provider.value}'")

    if prov.token:
        return prov.token

    if prov.token_file:
        logger.debug(f"Reading '{provider.value}' token from {prov.token_file}")
        with open(prov.token_file, 'r') as f:
            token = f.read().strip()
        if not token:
            raise TokenError(f'Token file {prov.token_file} is empty')
        return token

    if prov.keyfile:
        return await github_installation_token(
            github_keyfile=prov.keyfile,
            github_app_id=prov.app_id,
            github_installation_id=prov.installation_id,
            api_url=config.global_.api_url,
        )

    raise TokenError(f"No usable credential source for provider '{provider.value}'")


def token_source(provider: TokenProvider, config: RootConfig) -> TokenSource:
    """
    Bind a provider and configuration into a zero-argument coroutine
    function, suitable for GitHubClient and the git workflow.
    """

    async def fetch() -> str:
        return await fetch_provider_token(provider, config)

    return fetch


# The end.
