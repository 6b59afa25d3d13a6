"""
Git workflow for the gitpublish application: clone, write files,
commit and push.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import asyncio
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from .models import Author


logger = logging.getLogger(__name__)


async def run(*args: str, cwd: str = None) -> str:
    logger.debug(f'Running {args[:2]} in {cwd}')
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        raise subprocess.CalledProcessError(process.returncode, args, stderr=stderr)
    return stdout.decode('utf-8', errors='replace')


def authenticated_url(git_url: str, git_token: Optional[str] = None) -> str:
    if git_token:
        return git_url.replace('https://', f'https://x-access-token:{git_token}@', 1)
    return git_url


def write_files(repo_dir: str, file_contents: Dict[str, Union[str, bytes]]) -> None:
    """
    Write each file into the checkout at repo_dir, creating parent
    directories. Paths must be relative and may not leave the checkout.
    """

    root = Path(repo_dir).resolve()

    for name, content in file_contents.items():
        if not name or Path(name).is_absolute():
            raise ValueError(f'Invalid file path: {name!r}')

        dest = (root / name).resolve()
        if dest == root or root not in dest.parents or '.git' in dest.relative_to(root).parts:
            raise ValueError(f'File path escapes repository: {name!r}')

        dest.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            dest.write_bytes(content)
        else:
            dest.write_text(content, encoding='utf-8')


async def create_files(
        git_url: str,
        repo_name: str,
        author: Author,
        commit_message: str,
        file_contents: Dict[str, Union[str, bytes]],
        git_token: Optional[str] = None,
        work_dir: Optional[str] = None) -> bool:
    """
    Clone git_url into a scratch directory, write file_contents, and
    commit and push them as author. Returns False if the files were
    already identical to the remote and nothing was pushed.
    """

    auth_url = authenticated_url(git_url, git_token)

    with tempfile.TemporaryDirectory(prefix=f'{repo_name}-', dir=work_dir) as tmpdir:
        repo_dir = str(Path(tmpdir) / repo_name)

        logger.info(f'Cloning {git_url} to {repo_dir}')
        try:
            await run('git', 'clone', auth_url, repo_dir)
        except subprocess.CalledProcessError as e:
            # keep the token out of the error
            raise subprocess.CalledProcessError(
                e.returncode, ('git', 'clone', git_url, repo_dir), stderr=e.stderr) from None

        write_files(repo_dir, file_contents)

        await run('git', 'add', '--all', cwd=repo_dir)

        status = await run('git', 'status', '--porcelain', cwd=repo_dir)
        if not status.strip():
            logger.info(f'No changes to commit for {git_url}')
            return False

        await run(
            'git',
            '-c', f'user.name={author.name}',
            '-c', f'user.email={author.email}',
            'commit', '--author', author.ident(), '-m', commit_message,
            cwd=repo_dir)

        logger.info(f'Pushing {len(file_contents)} files to {git_url}')
        await run('git', 'push', 'origin', 'HEAD', cwd=repo_dir)

        await run('git', 'log', '-1', '--oneline', cwd=repo_dir)

    return True


# The end.
