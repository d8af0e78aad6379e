"""CLI entry point."""

import sys
import click
import logging
from typing import Any, Dict, List, Optional, Tuple
from click import Context
from github import GithubException

from ...config import Config, validate_for_run, validate_manifest
from ...config.config_parser import parse_config
from ...exec import ProcessRunner, in_github_actions
from ...git import RealGit
from ...github import GitHubClient, find_github_token
from ...packagemanager import SkippedUpdate, get_package_manager
from ...typing import PyupdepsError
from ...updater import DependencyUpdater, RunOutcome, build_plan

# Get module logger
logger = logging.getLogger(__name__)

def fail(err: Exception) -> None:
    """Report a fatal error and exit."""
    logger.error(f"{err}")
    if in_github_actions():
        message = str(err).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        print(f"::error::{message}")
    sys.exit(1)

def split_names(values: Tuple[str, ...]) -> List[str]:
    """Accept repeated options as well as newline or comma separated lists."""
    names: List[str] = []
    for value in values:
        for part in value.replace(",", "\n").splitlines():
            part = part.strip()
            if part:
                names.append(part)
    return names

def setup_config(directory: Optional[str], overrides: Dict[str, Dict[str, Any]]) -> Config:
    """Build the run configuration once, from git, files, env and options."""
    git_cmd = RealGit(directory)
    if directory:
        overrides.setdefault('run', {}).setdefault('workspace', directory)
    cfg = parse_config(git_cmd, overrides)
    config = Config(cfg)
    config.run.github_token = find_github_token(config.run.github_token)
    return config

def common_options(f: Any) -> Any:
    options = [
        click.option('-C', '--directory', type=click.Path(exists=True, file_okay=False, dir_okay=True),
                     help='Workspace root (defaults to GITHUB_WORKSPACE or the enclosing git checkout)'),
        click.option('-m', '--manifest', 'manifest_path', type=str,
                     help='Path to the package manager manifest, e.g. composer.json'),
        click.option('-t', '--package-manager-type', type=str,
                     help="Package manager type (default: composer)"),
        click.option('-i', '--include-dep', 'include_deps', multiple=True,
                     help="Only update these dependencies (repeatable, or newline separated)"),
        click.option('-x', '--exclude-dep', 'exclude_deps', multiple=True,
                     help="Never update these dependencies (repeatable, or newline separated)"),
        click.option('-v', '--verbose', count=True,
                     help="Increase verbosity (can be used multiple times for more verbosity)"),
    ]
    for option in reversed(options):
        f = option(f)
    return f

def update_overrides(manifest_path: Optional[str], package_manager_type: Optional[str],
                     include_deps: Tuple[str, ...], exclude_deps: Tuple[str, ...]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {
        'manifest_path': manifest_path,
        'package_manager_type': package_manager_type,
    }
    if include_deps:
        overrides['include_deps'] = split_names(include_deps)
    if exclude_deps:
        overrides['exclude_deps'] = split_names(exclude_deps)
    return overrides

@click.group()
@click.version_option(package_name="pyupdeps")
@click.pass_context
def cli(ctx: Context) -> None:
    """pyupdeps - dependency update pull requests on GitHub."""
    ctx.ensure_object(dict)

@cli.command(name="run", help="Update outdated dependencies on a branch and open a pull request")
@common_options
@click.option('-b', '--branch-prefix', type=str,
              help="Prefix of the update branch name (default: update-deps)")
@click.option('--github-token', type=str, help="GitHub token (default: GITHUB_TOKEN or the gh CLI login)")
@click.option('--sha', type=str, help="Commit to start the update branch from (default: GITHUB_SHA, HEAD or the default branch head)")
@click.pass_context
def run(ctx: Context, directory: Optional[str], manifest_path: Optional[str],
        package_manager_type: Optional[str], include_deps: Tuple[str, ...], exclude_deps: Tuple[str, ...],
        verbose: int, branch_prefix: Optional[str], github_token: Optional[str], sha: Optional[str]) -> None:
    """Run command."""
    from ... import setup_logging
    setup_logging(verbose)

    try:
        update = update_overrides(manifest_path, package_manager_type, include_deps, exclude_deps)
        update['branch_prefix'] = branch_prefix
        config = setup_config(directory, {
            'update': update,
            'run': {'github_token': github_token, 'sha': sha},
        })
        validate_for_run(config)

        runner = ctx.obj.get('runner') or ProcessRunner()
        package_manager = get_package_manager(config.update.package_manager_type, runner)
        github_client = ctx.obj.get('github_client')
        if github_client is None:
            from ...github.adapters import PyGithubAdapter
            github_client = PyGithubAdapter.from_token(
                config.run.github_token or "", config.repo.github_api_url)
        github = GitHubClient(config, github_client)

        result = DependencyUpdater(config, github, package_manager, runner).run()
    except (PyupdepsError, GithubException) as e:
        fail(e)
        return

    if result.outcome is RunOutcome.COMPLETED:
        verb = "Updated" if result.pull_request_reused else "Opened"
        click.echo(f"{verb} pull request #{result.pull_request_number} with {len(result.commits)} commit(s)")

@cli.command(name="plan", help="Show the update plan without changing anything on GitHub")
@common_options
@click.pass_context
def plan(ctx: Context, directory: Optional[str], manifest_path: Optional[str],
         package_manager_type: Optional[str], include_deps: Tuple[str, ...], exclude_deps: Tuple[str, ...],
         verbose: int) -> None:
    """Plan command."""
    from ... import setup_logging
    setup_logging(verbose)

    try:
        config = setup_config(directory, {
            'update': update_overrides(manifest_path, package_manager_type, include_deps, exclude_deps),
        })
        validate_manifest(config)
        runner = ctx.obj.get('runner') or ProcessRunner()
        package_manager = get_package_manager(config.update.package_manager_type, runner)
        entries = build_plan(config, package_manager)
    except PyupdepsError as e:
        fail(e)
        return

    if not entries:
        click.echo("No updates needed")
        return
    for entry in entries:
        if isinstance(entry, SkippedUpdate):
            click.echo(f"skip  {entry.description}")
            continue
        click.echo(f"{entry.description}")
        if entry.detailed_description:
            for line in entry.detailed_description.splitlines():
                click.echo(f"    {line}")
        click.echo(f"    $ {' '.join(entry.args)}")

def main() -> None:
    """Main entry point."""
    cli(obj={})

if __name__ == "__main__":
    main()
