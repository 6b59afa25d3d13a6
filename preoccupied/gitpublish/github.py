"""
GitHub REST client and installation token logic for the gitpublish
application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional, Tuple, Union

import httpx
import jwt
import logging

from .models import Repository, RepositoryHook, User, valid_repo_name


logger = logging.getLogger(__name__)


DEFAULT_API_URL = 'https://api.github.com'

API_VERSION = '2022-11-28'

CACHE_THRESHOLD = 50 * 60  # 50 minutes


# Cache for GitHub installation tokens, keyed by (api_url, app_id, installation_id)
_token_cache: Dict[Tuple[str, str, str], Dict[str, Union[str, datetime]]] = {}
_cache_lock = asyncio.Lock()


TokenSource = Callable[[], Awaitable[str]]


async def github_installation_token(
        github_keyfile: str,
        github_app_id: str,
        github_installation_id: str,
        api_url: str = DEFAULT_API_URL) -> str:
    """
    Get a GitHub installation token for the given app ID and
    installation ID using the private key in github_keyfile.
    Returns the installation token as a string.

    Tokens are cached and reused until they are within 50 minutes of
    their expiry, at which point a new token is requested.
    """

    if not (github_app_id and github_installation_id and github_keyfile):
        raise ValueError('github_app_id, github_installation_id, and github_keyfile must be set')

    cache_key = (api_url, github_app_id, github_installation_id)
    now = datetime.now(timezone.utc)

    async with _cache_lock:
        if cache_key in _token_cache:
            cached = _token_cache[cache_key]
            threshold = cached['expires_at'].timestamp() - CACHE_THRESHOLD
            if now.timestamp() < threshold:
                logger.debug(f'Using cached token for {github_app_id} / {github_installation_id}')
                return cached['token']

            logger.debug(f'Token for {github_app_id} / {github_installation_id} is near expiry, removing from cache')
            del _token_cache[cache_key]

    with open(github_keyfile, 'r') as fk:
        private_key = fk.read()

    payload = {
        'iat': int(time.time()) - 60,
        'exp': int(time.time()) + (10 * 60),
        'iss': github_app_id,
    }

    jwt_token = jwt.encode(payload, private_key, algorithm='RS256')
    headers = {
        'Authorization': f'Bearer {jwt_token}',
        'Accept': 'application/vnd.github+json'
    }

    async with httpx.AsyncClient() as client:
        r = await client.post(
            f'{api_url.rstrip("/")}/app/installations/{github_installation_id}/access_tokens',
            headers=headers,
        )
        r.raise_for_status()
        response_data = r.json()

    token = response_data['token']

    # GitHub returns ISO 8601 with a trailing Z
    expires_at = datetime.fromisoformat(response_data['expires_at'].replace('Z', '+00:00'))

    async with _cache_lock:
        _token_cache[cache_key] = {
            'token': token,
            'expires_at': expires_at,
        }

    logger.debug(f'New token for {github_app_id} / {github_installation_id} expires at {expires_at}')
    return token


def is_not_found(err: Exception) -> bool:
    """
    True if err is an HTTP status error carrying a 404 response.
    """

    return (isinstance(err, httpx.HTTPStatusError) and
            err.response is not None and
            err.response.status_code == 404)


class GitHubClient:
    """
    Minimal client for the parts of the GitHub REST API used by the
    publishing service. Each call opens its own HTTP client and raises
    httpx.HTTPStatusError on any non-success response.
    """

    def __init__(
            self,
            token_source: TokenSource,
            api_url: str = DEFAULT_API_URL,
            transport: Optional[httpx.AsyncBaseTransport] = None):

        self.api_url = api_url.rstrip('/')
        self.token_source = token_source
        self.transport = transport


    async def _headers(self) -> Dict[str, str]:
        token = await self.token_source()
        return {
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': API_VERSION,
        }


    async def _request(self, method: str, path: str, json=None):
        headers = await self._headers()

        async with httpx.AsyncClient(base_url=self.api_url, transport=self.transport) as client:
            r = await client.request(method, path, headers=headers, json=json)
            r.raise_for_status()
            return r.json()


    @staticmethod
    def _repo_path(owner: str, name: str) -> str:
        for segment in (owner, name):
            if not valid_repo_name(segment):
                raise ValueError(f'Invalid repository path segment: {segment!r}')
        return f'/repos/{owner}/{name}'


    async def get_user(self) -> User:
        """
        Fetch the authenticated user.
        """

        return User.model_validate(await self._request('GET', '/user'))


    async def get_repository(self, owner: str, name: str) -> Repository:
        return Repository.model_validate(
            await self._request('GET', self._repo_path(owner, name)))


    async def create_repository(self, name: str) -> Repository:
        logger.info(f"Creating repository '{name}'")
        data = await self._request('POST', '/user/repos', json={'name': name})
        return Repository.model_validate(data)


    async def create_hook(self, owner: str, name: str, hook: RepositoryHook) -> RepositoryHook:
        logger.info(f"Creating {hook.name} hook on '{owner}/{name}' for {hook.config.url}")
        payload = hook.model_dump(exclude_none=True)
        data = await self._request('POST', f'{self._repo_path(owner, name)}/hooks', json=payload)
        return RepositoryHook.model_validate(data)


# The end.
