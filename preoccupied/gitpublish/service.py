"""
Publishing service for the gitpublish application. Creates or updates
project files in a GitHub repository, registering a build webhook the
first time a repository is created.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
from datetime import date, timezone
from typing import Optional

import httpx

from . import workflow
from .config import RootConfig
from .errors import WebhookConfigError, launder_exception
from .github import GitHubClient, TokenSource, is_not_found
from .models import HookConfig, ProjectFilesRequest, Repository, RepositoryHook, User
from .tokens import TokenProvider, token_source


logger = logging.getLogger(__name__)


# Accounts created after this date use id+login for their no-reply address
# https://docs.github.com/en/account-and-profile/setting-up-and-managing-your-personal-account-on-github/managing-email-preferences/setting-your-commit-email-address
NOREPLY_EMAIL_CUTOFF = date(2017, 7, 18)


def noreply_email(user: User, host: str = 'github.com') -> str:
    """
    The no-reply commit address GitHub assigns to user.
    """

    created = user.created_at
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc)

    if created.date() > NOREPLY_EMAIL_CUTOFF:
        return f'{user.id}+{user.login}@users.noreply.{host}'
    else:
        return f'{user.login}@users.noreply.{host}'


class GitHubService:
    """
    Orchestrates the hosting client, the git workflow, and the token
    provider.
    """

    def __init__(
            self,
            client: GitHubClient,
            git_token: TokenSource,
            create_files=workflow.create_files,
            noreply_host: str = 'github.com',
            webhook_secret: Optional[str] = None,
            work_dir: Optional[str] = None):

        self.client = client
        self.git_token = git_token
        self.create_files = create_files
        self.noreply_host = noreply_host
        self.webhook_secret = webhook_secret
        self.work_dir = work_dir


    @classmethod
    def from_config(cls, config: RootConfig) -> 'GitHubService':
        glbl = config.global_
        tokens = token_source(TokenProvider.GITHUB, config)

        return cls(
            client=GitHubClient(tokens, api_url=glbl.api_url),
            git_token=tokens,
            noreply_host=glbl.noreply_host,
            webhook_secret=glbl.webhook_secret,
            work_dir=glbl.work_dir,
        )


    async def create_or_update_project_files(self, request: ProjectFilesRequest) -> str:
        """
        Write the request's files into the named repository, creating the
        repository and its webhook if it does not yet exist. Returns the
        clone URL. Every failure is raised as a ServerError.
        """

        try:
            repository = await self.get_repository(request.repo_name)
            if repository is None:
                repository = await self.create_repository(request.repo_name)
                await self._write_files(repository, request)

                if not request.webhook_url:
                    raise WebhookConfigError('WebHook Url is required for setting up a new repository!')
                await self.create_webhook(repository, request.webhook_url)

            else:
                await self._write_files(repository, request)

            return repository.clone_url

        except Exception as e:
            logger.error(f"Failed to publish files to '{request.repo_name}': {e}")
            raise launder_exception(e)


    async def get_clone_url(self, name: str) -> Optional[str]:
        repository = await self.get_repository(name)
        return repository.clone_url if repository else None


    async def get_api_user(self) -> User:
        """
        The authenticated user. If the user keeps their email private, a
        no-reply address is filled in so it can be used for commits.
        """

        user = await self.client.get_user()
        if user.email is None:
            user.email = noreply_email(user, self.noreply_host)
        return user


    async def get_repository(self, name: str) -> Optional[Repository]:
        """
        The named repository of the authenticated user, or None if it does
        not exist. Any other error propagates.
        """

        user = await self.client.get_user()
        try:
            return await self.client.get_repository(user.login, name)
        except httpx.HTTPStatusError as e:
            if not is_not_found(e):
                raise
            return None


    async def create_repository(self, name: str) -> Repository:
        return await self.client.create_repository(name)


    async def get_or_create_repository(self, name: str) -> Repository:
        repository = await self.get_repository(name)
        if repository is not None:
            return repository
        return await self.create_repository(name)


    async def create_webhook(self, repository: Repository, url: str) -> RepositoryHook:
        """
        Register a json push webhook on repository pointing at url.
        """

        owner, _, name = (repository.full_name or '').partition('/')
        if not name:
            owner = (await self.client.get_user()).login
            name = repository.name

        hook = RepositoryHook(config=HookConfig(url=url, secret=self.webhook_secret))
        return await self.client.create_hook(owner, name, hook)


    async def _write_files(self, repository: Repository, request: ProjectFilesRequest) -> None:
        await self.create_files(
            git_url=repository.html_url,
            repo_name=repository.name,
            author=request.author,
            commit_message=request.commit_message,
            file_contents=request.file_contents,
            git_token=await self.git_token(),
            work_dir=self.work_dir,
        )


# The end.
