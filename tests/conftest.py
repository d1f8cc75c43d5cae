import shutil
import subprocess

import pytest

from buildstamp.config import DEFAULTS


@pytest.fixture
def settings():
    return dict(DEFAULTS)


@pytest.fixture
def isolated_dir(tmp_path, monkeypatch):
    """A directory git will not resolve to any enclosing repository."""
    monkeypatch.setenv('GIT_CEILING_DIRECTORIES', str(tmp_path))
    work = tmp_path / 'work'
    work.mkdir()
    return work


@pytest.fixture
def git_repo(isolated_dir):
    if shutil.which('git') is None:
        pytest.skip('git not installed')

    def git(*args):
        subprocess.run(['git', *args], cwd=isolated_dir, check=True, capture_output=True)

    git('init', '-q')
    git('-c', 'user.name=Build Bot', '-c', 'user.email=build@example.com',
        'commit', '-q', '--allow-empty', '-m', 'initial')
    return isolated_dir
