"""
Shared pytest fixtures for gitpublish tests.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from preoccupied.gitpublish import config as config_module
from preoccupied.gitpublish.config import GlobalConfig, ProviderConfig, RootConfig
from preoccupied.gitpublish.models import Author, ProjectFilesRequest, Repository, User
from preoccupied.gitpublish.service import GitHubService


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for tests.
    """

    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(autouse=True)
def clear_config_cache():
    """
    Forget any cached configuration before and after each test.
    """

    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def mock_config():
    """
    Create a RootConfig with a static GitHub token.
    """

    return RootConfig(
        global_=GlobalConfig(webhook_secret='hooksecret'),
        providers={'github': ProviderConfig(token='ghp_test_token')}
    )


@pytest.fixture
def author():
    return Author(name='Test Author', email='author@example.com')


@pytest.fixture
def project_request(author):
    """
    Create a ProjectFilesRequest for testing.
    """

    return ProjectFilesRequest(
        repo_name='test-repo',
        author=author,
        commit_message='Update project',
        file_contents={'README.md': '# test\n', 'src/main.py': b'print(1)\n'},
        webhook_url='https://ci.example.com/hook'
    )


@pytest.fixture
def api_user():
    return User(
        login='octocat',
        id=583231,
        email='octocat@example.com',
        created_at=datetime(2011, 1, 25, 18, 44, 36, tzinfo=timezone.utc)
    )


@pytest.fixture
def repository():
    return Repository(
        name='test-repo',
        full_name='octocat/test-repo',
        clone_url='https://github.com/octocat/test-repo.git',
        html_url='https://github.com/octocat/test-repo'
    )


@pytest.fixture
def mock_client(api_user):
    """
    Create a mocked GitHubClient which knows the authenticated user.
    """

    client = AsyncMock()
    client.get_user = AsyncMock(return_value=api_user)
    return client


@pytest.fixture
def mock_create_files():
    return AsyncMock(return_value=True)


@pytest.fixture
def service(mock_client, mock_create_files):
    """
    Create a GitHubService over mocked collaborators.
    """

    return GitHubService(
        client=mock_client,
        git_token=AsyncMock(return_value='ghp_git_token'),
        create_files=mock_create_files,
        webhook_secret='hooksecret'
    )


@pytest.fixture
def mock_env_vars(monkeypatch):
    """
    Clear and optionally set environment variables for testing.
    """

    env_vars_to_clear = [
        'CONFIG_PATH',
        'GITPUBLISH_ENABLED',
        'GITPUBLISH_API_URL',
        'GITPUBLISH_NOREPLY_HOST',
        'GITPUBLISH_WEBHOOK_URL',
        'GITPUBLISH_WEBHOOK_SECRET',
        'GITPUBLISH_API_SECRET',
        'GITPUBLISH_WORK_DIR',
        'GITPUBLISH_GITHUB_TOKEN',
        'GITPUBLISH_GITHUB_TOKEN_FILE',
        'GITPUBLISH_GITHUB_APP_ID',
        'GITPUBLISH_GITHUB_INSTALLATION_ID',
        'GITPUBLISH_GITHUB_KEYFILE'
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    return monkeypatch


# The end.
