"""
FastAPI application for the gitpublish service.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException

from .config import RootConfig, get_config
from .errors import ServerError
from .models import ProjectFilesRequest, valid_repo_name
from .service import GitHubService


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def app_startup():
    """
    Startup event handler for the app
    """

    try:
        config = get_config()
    except Exception as e:
        logger.error(f'Failed to load configuration: {e}', exc_info=True)
        raise

    if not config.global_.enabled:
        logger.warning('GitHub integration is disabled')


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """
    Lifespan event handler for the app
    """

    logger.info('Starting up...')

    await app_startup()

    try:
        yield
    finally:

        logger.info('Shutting down...')


app = FastAPI(lifespan=app_lifespan)


def checked_config(x_api_token: str = Header(None)) -> RootConfig:
    """
    Dependency which loads the configuration, and refuses the request
    when the integration is disabled or the API token does not match.
    """

    config = get_config()

    if not config.global_.enabled:
        raise HTTPException(status_code=503, detail='GitHub integration is disabled')

    api_secret = config.global_.api_secret
    if api_secret and x_api_token != api_secret:
        raise HTTPException(status_code=401, detail='Bad secret')

    return config


def get_service(config: RootConfig) -> GitHubService:
    """
    Build the publishing service for a request
    """

    return GitHubService.from_config(config)


@app.post('/projects')
async def create_or_update_project(
        request: ProjectFilesRequest,
        config: RootConfig = Depends(checked_config)):
    """
    Create or update the files of a project repository
    """

    if not request.webhook_url and config.global_.webhook_url:
        request = request.model_copy(update={'webhook_url': config.global_.webhook_url})

    service = get_service(config)

    try:
        clone_url = await service.create_or_update_project_files(request)
    except ServerError as e:
        logger.error(f"Error publishing to '{request.repo_name}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f'Publish failed: {str(e)}')

    return {'status': 'ok', 'repo': request.repo_name, 'clone_url': clone_url}


@app.get('/repos/{name}/clone-url')
async def clone_url(name: str, config: RootConfig = Depends(checked_config)):
    """
    Look up the clone URL of a repository by name
    """

    if not valid_repo_name(name):
        raise HTTPException(status_code=422, detail=f"Invalid repository name '{name}'")

    service = get_service(config)

    try:
        url = await service.get_clone_url(name)
    except httpx.HTTPError as e:
        logger.error(f"Error looking up repository '{name}': {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=f'Lookup failed: {str(e)}')
    except Exception as e:
        logger.error(f"Error looking up repository '{name}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f'Lookup failed: {str(e)}')

    if url is None:
        raise HTTPException(status_code=404, detail=f"Repository '{name}' not found")

    return {'name': name, 'clone_url': url}


@app.get('/user')
async def api_user(config: RootConfig = Depends(checked_config)):
    """
    The authenticated user, with a commit email filled in
    """

    service = get_service(config)

    try:
        user = await service.get_api_user()
    except httpx.HTTPError as e:
        logger.error(f'Error fetching API user: {e}', exc_info=True)
        raise HTTPException(status_code=502, detail=f'User lookup failed: {str(e)}')
    except Exception as e:
        logger.error(f'Error fetching API user: {e}', exc_info=True)
        raise HTTPException(status_code=500, detail=f'User lookup failed: {str(e)}')

    return user.model_dump(mode='json')


# The end.
