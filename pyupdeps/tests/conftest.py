"""Configuration for pytest."""

import pytest
import logging

from pyupdeps.config import Config
from pyupdeps.github import GitHubClient
from pyupdeps.tests.fake_github import START_SHA, FakeGithub

logger = logging.getLogger(__name__)

GITHUB_ENV_VARS = [
    "GITHUB_ACTIONS",
    "GITHUB_API_URL",
    "GITHUB_GRAPHQL_URL",
    "GITHUB_REPOSITORY",
    "GITHUB_SHA",
    "GITHUB_TOKEN",
    "GITHUB_WORKSPACE",
]

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep the runner's own GitHub Actions environment and gh login out of tests."""
    for name in GITHUB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path

@pytest.fixture
def config(workspace):
    return Config({
        'repo': {
            'github_repo_owner': 'octo',
            'github_repo_name': 'app',
        },
        'update': {
            'manifest_path': 'composer.json',
        },
        'run': {
            'workspace': str(workspace),
            'sha': START_SHA,
            'github_token': 'test-token',
        },
    })

@pytest.fixture
def fake_github():
    return FakeGithub(owner='octo', name='app')

@pytest.fixture
def github(config, fake_github):
    return GitHubClient(config, fake_github)
