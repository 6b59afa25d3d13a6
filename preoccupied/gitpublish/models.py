"""
Request and resource models for the gitpublish application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import re
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


REPO_NAME_PATTERN = r'^[A-Za-z0-9._-]+$'

_repo_name_re = re.compile(REPO_NAME_PATTERN)


def valid_repo_name(name: str) -> bool:
    """
    True if name is usable as a single repository path segment.
    """

    return bool(_repo_name_re.match(name)) and name not in ('.', '..')


class Author(BaseModel):
    """
    Commit author identity
    """

    name: str
    email: str

    model_config = {'frozen': True}


    def ident(self) -> str:
        return f'{self.name} <{self.email}>'


class ProjectFilesRequest(BaseModel):
    """
    A request to create or update files in a hosted repository
    """

    repo_name: str = Field(pattern=REPO_NAME_PATTERN)
    author: Author
    commit_message: str = Field(min_length=1)
    file_contents: Dict[str, Union[str, bytes]] = Field(default_factory=dict)
    webhook_url: Optional[str] = None

    model_config = {'frozen': True}


    @field_validator('repo_name')
    @classmethod
    def check_repo_name(cls, v: str) -> str:
        if not valid_repo_name(v):
            raise ValueError(f'Invalid repository name: {v!r}')
        return v

    @field_validator('commit_message')
    @classmethod
    def check_commit_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Commit message may not be blank')
        return v


class Repository(BaseModel):
    """
    Repository handle as returned by the hosting API
    """

    name: str
    clone_url: str
    html_url: str
    full_name: Optional[str] = None


class User(BaseModel):
    """
    Hosting account as returned by the hosting API
    """

    login: str
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime


class HookConfig(BaseModel):
    url: str
    content_type: str = 'json'
    secret: Optional[str] = None


class RepositoryHook(BaseModel):
    """
    Webhook registration payload
    """

    name: str = 'web'
    active: bool = True
    events: List[str] = Field(default_factory=lambda: ['push'])
    config: HookConfig
    id: Optional[int] = None


# The end.
