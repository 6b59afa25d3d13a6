"""
Publish project files to GitHub repositories, with build webhook
provisioning.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from preoccupied.gitpublish.app import app
from preoccupied.gitpublish.config import get_config
from preoccupied.gitpublish.errors import ServerError
from preoccupied.gitpublish.service import GitHubService


__all__ = ['app', 'get_config', 'GitHubService', 'ServerError']


# The end.
