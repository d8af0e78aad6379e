"""Config parser logic."""

import os
from typing import Dict, Any, Optional, Mapping
import logging
import yaml

from ...typing import GitInterface

# Get module logger
logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".update-deps.yaml"

SectionConfig = Dict[str, Any]  # Use Any since yaml can return various types
Config = Dict[str, SectionConfig]

def _merge_section(target: SectionConfig, values: Optional[Mapping[str, Any]]) -> None:
    """Copy non-None values into a config section."""
    if not values:
        return
    for key, value in values.items():
        if value is None:
            continue
        target[key] = value

def parse_remote_url(remote_url: str) -> Optional[tuple]:
    """Extract (owner, name) from an SSH or HTTPS GitHub remote url."""
    remote_url = remote_url.strip()
    if not remote_url:
        return None
    if remote_url.startswith("git@") or ("@" in remote_url and "://" not in remote_url):
        # SSH format: git@github.com:owner/repo.git
        repo_part = remote_url.split(":")[-1]
    else:
        # HTTPS format: https://github.com/owner/repo.git
        repo_part = remote_url.split("://", 1)[-1].split("/", 1)[-1]
    if repo_part.endswith(".git"):
        repo_part = repo_part[:-4]
    parts = [p for p in repo_part.split("/") if p]
    if len(parts) < 2:
        return None
    return parts[-2], parts[-1]

def _workspace(git_cmd: Optional[GitInterface], override: Optional[str]) -> str:
    if override:
        return os.path.abspath(override)
    env_workspace = os.environ.get("GITHUB_WORKSPACE")
    if env_workspace:
        return os.path.abspath(env_workspace)
    if git_cmd is not None:
        try:
            toplevel = git_cmd.run_cmd("rev-parse --show-toplevel").strip()
            if toplevel:
                return toplevel
        except Exception as e:
            logger.debug(f"Not inside a git checkout: {e}")
    return os.getcwd()

def _load_config_file(workspace: str) -> Config:
    path = os.path.join(workspace, CONFIG_FILE_NAME)
    try:
        with open(path, 'r') as f:
            logger.info(f"Found {CONFIG_FILE_NAME}, loading...")
            file_config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return {}
    if not isinstance(file_config, dict):
        return {}
    logger.debug(f"Config from {CONFIG_FILE_NAME}: {file_config}")
    return {k: v for k, v in file_config.items() if isinstance(v, dict)}

def parse_config(git_cmd: Optional[GitInterface], overrides: Optional[Config] = None) -> Config:
    """Parse config from defaults, the repository config file, the environment and overrides.

    Later layers win. Overrides come from the command line and use the same
    section layout as the config file ('repo', 'update', 'run').
    """
    overrides = overrides or {}
    config: Config = {
        'repo': {
            'github_api_url': 'https://api.github.com',
        },
        'update': {
            'branch_prefix': 'update-deps',
            'package_manager_type': 'composer',
            'include_deps': [],
            'exclude_deps': [],
        },
        'run': {},
    }

    workspace = _workspace(git_cmd, overrides.get('run', {}).get('workspace'))
    config['run']['workspace'] = workspace

    file_config = _load_config_file(workspace)
    for section in ('repo', 'update'):
        _merge_section(config[section], file_config.get(section))

    # Environment as provided by a GitHub Actions runner
    github_repository = os.environ.get("GITHUB_REPOSITORY")
    if github_repository and "/" in github_repository:
        owner, name = github_repository.split("/", 1)
        config['repo']['github_repo_owner'] = owner
        config['repo']['github_repo_name'] = name
    _merge_section(config['repo'], {
        'github_api_url': os.environ.get("GITHUB_API_URL"),
        'github_graphql_url': os.environ.get("GITHUB_GRAPHQL_URL"),
    })
    _merge_section(config['run'], {
        'sha': os.environ.get("GITHUB_SHA"),
    })

    for section in ('repo', 'update', 'run'):
        _merge_section(config[section], overrides.get(section))
    config['run']['workspace'] = workspace

    if git_cmd is not None:
        # Try to extract repo owner/name from git remote if not configured
        if not config['repo'].get('github_repo_owner') or not config['repo'].get('github_repo_name'):
            try:
                parsed = parse_remote_url(git_cmd.run_cmd("remote get-url origin"))
                if parsed:
                    config['repo'].setdefault('github_repo_owner', parsed[0])
                    config['repo'].setdefault('github_repo_name', parsed[1])
            except Exception as e:
                logger.error(f"Failed to parse git remote: {e}")

        if not config['run'].get('sha'):
            try:
                config['run']['sha'] = git_cmd.run_cmd("rev-parse HEAD").strip()
            except Exception as e:
                logger.warning(f"Failed to read HEAD commit, the default branch head will be used: {e}")

    return config
