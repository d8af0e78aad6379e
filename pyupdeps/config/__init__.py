"""Config module."""

import os
from typing import Dict, Any

from .models import RepoConfig, UpdateConfig, RunConfig, PyupdepsConfig
from ..typing import ConfigurationError

class Config(PyupdepsConfig):
    """Config object holding repository, update and run config.

    Built from the nested dict produced by the config parser.
    """
    def __init__(self, config: Dict[str, Dict[str, Any]]):
        """Initialize with parsed config dict."""
        super().__init__(
            repo=RepoConfig.model_validate(config.get('repo', {})),
            update=UpdateConfig.model_validate(config.get('update', {})),
            run=RunConfig.model_validate(config.get('run', {})),
        )

def manifest_abspath(config: PyupdepsConfig) -> str:
    """Absolute manifest path; relative paths are taken from the workspace."""
    manifest = config.update.manifest_path or ""
    if os.path.isabs(manifest):
        return manifest
    return os.path.normpath(os.path.join(config.run.workspace, manifest))

def relative_manifest_path(config: PyupdepsConfig) -> str:
    """Manifest path relative to the workspace root, without a leading slash."""
    path = os.path.relpath(manifest_abspath(config), config.run.workspace)
    path = path.replace(os.sep, "/")
    if path.startswith("/"):
        path = path[1:]
    return path

def head_branch_name(config: PyupdepsConfig) -> str:
    """Update branch for the configured manifest; one per manifest.

    The prefix is joined with '/' unless it already ends in a separator.
    """
    prefix = config.update.branch_prefix
    if prefix and not prefix.endswith(("/", "-", "_")):
        prefix += "/"
    return f"{prefix}{relative_manifest_path(config)}"

def pull_request_title(config: PyupdepsConfig) -> str:
    return f"Update deps in {relative_manifest_path(config)}"

def validate_manifest(config: PyupdepsConfig) -> None:
    if not config.update.manifest_path:
        raise ConfigurationError("Input required and not supplied: manifest path")
    relative = relative_manifest_path(config)
    if relative == ".." or relative.startswith("../"):
        raise ConfigurationError(
            f"Package manager manifest {config.update.manifest_path} is outside the workspace {config.run.workspace}")
    if not os.path.exists(manifest_abspath(config)):
        raise ConfigurationError(f"Package manager manifest not found at {config.update.manifest_path}")
    if not config.update.package_manager_type:
        raise ConfigurationError("Input required and not supplied: package manager type")

def validate_for_run(config: PyupdepsConfig) -> None:
    """Check everything a run needs before anything touches the remote."""
    validate_manifest(config)
    if not config.repo.github_repo_owner or not config.repo.github_repo_name:
        raise ConfigurationError(
            "Could not determine the GitHub repository; set GITHUB_REPOSITORY or repo.github_repo_owner/github_repo_name")
    if not config.run.github_token:
        raise ConfigurationError("Input required and not supplied: GitHub token")
