"""Composer backend."""

import json
import os
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .command import PlannedUpdate, SkippedUpdate, UpdateCommand
from .constraints import resolve_constraint, satisfies
from .grouping import Dependency, SkippedGroup, UpdateGroup, group_dependencies
from ..typing import CommandError, ConfigurationError, ConstraintError, ProcessRunnerProtocol

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = "composer.lock"

class OutdatedPackage(BaseModel):
    """One entry of `composer outdated --format=json`."""
    name: str
    version: str
    latest: str
    latest_status: Optional[str] = Field(default=None, alias="latest-status")

    class Config:
        """Pydantic config."""
        extra = "allow"
        populate_by_name = True

class OutdatedReport(BaseModel):
    installed: List[OutdatedPackage] = Field(default_factory=list)

    class Config:
        """Pydantic config."""
        extra = "allow"

class ComposerManifest:
    """The parts of composer.json the planner reads."""

    def __init__(self, path: str, data: Dict[str, Any]):
        self.path = path
        self.require: Dict[str, str] = data.get('require') or {}
        self.require_dev: Dict[str, str] = data.get('require-dev') or {}

    @classmethod
    def load(cls, path: str) -> 'ComposerManifest':
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Package manager manifest not found at {path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid manifest {path}: expected a JSON object")
        return cls(path, data)

    def constraint_for(self, name: str) -> str:
        constraint = self.require.get(name)
        if constraint is None:
            constraint = self.require_dev.get(name)
        if constraint is None or not str(constraint).strip():
            raise ConstraintError(f"No version constraint for {name} in {self.path}")
        return str(constraint).strip()

    def is_dev(self, name: str) -> bool:
        return name in self.require_dev

def build_command(group: UpdateGroup, manifest: ComposerManifest, cwd: str) -> UpdateCommand:
    """Turn an update group into one composer invocation."""
    args = ['composer']
    detailed_description: Optional[str] = None

    if len(group) > 1:
        description = f"Update {len(group)} dependencies"
        detailed_description = "\n".join(f"{d.name} to {d.latest}" for d in group.members)
        args.append('require')
        for dependency in group.members:
            constraint = resolve_constraint(manifest.constraint_for(dependency.name), dependency.latest)
            args.append(f"{dependency.name}:{constraint}")
        args.append('--update-with-dependencies')
        if group.is_dev:
            args.append('--dev')
    else:
        dependency = group.members[0]
        current = manifest.constraint_for(dependency.name)
        description = f"Update {dependency.name} to {dependency.latest}"
        if satisfies(dependency.latest, current):
            # No manifest edit; still refreshes the lock file and transitive deps
            args.extend(['update', dependency.name, '--with-dependencies'])
        else:
            constraint = resolve_constraint(current, dependency.latest)
            args.extend(['require', f"{dependency.name}:{constraint}", '--update-with-dependencies'])
            if dependency.is_dev:
                args.append('--dev')

    return UpdateCommand(
        args=args,
        cwd=cwd,
        description=description,
        detailed_description=detailed_description,
    )

class ComposerPackageManager:
    """Plans updates with `composer outdated` and `composer why-not`."""

    def __init__(self, runner: ProcessRunnerProtocol):
        self.runner = runner

    def _outdated(self, cwd: str) -> OutdatedReport:
        args = ['composer', 'outdated', '--direct', '--format=json']
        output = self.runner.run(cwd, args)
        try:
            return OutdatedReport.model_validate(json.loads(output))
        except (json.JSONDecodeError, ValueError) as e:
            raise CommandError(args, 0, f"Unexpected output: {e}\n{output}")

    def list_update_groups(self, exclude_deps: Sequence[str], include_deps: Sequence[str],
                           manifest_path: str) -> List[PlannedUpdate]:
        manifest = ComposerManifest.load(manifest_path)
        cwd = os.path.dirname(os.path.abspath(manifest_path))

        self.runner.run(cwd, ['composer', 'install'], label="Installing dependencies")
        report = self._outdated(cwd)
        logger.info(f"Found {len(report.installed)} outdated direct dependencies")

        outdated = [
            Dependency(p.name, p.version, p.latest, manifest.is_dev(p.name))
            for p in report.installed
        ]

        def probe(dependency: Dependency) -> str:
            return self.runner.run(
                cwd, ['composer', 'why-not', dependency.name, dependency.latest],
                ignore_return_code=True,
            )

        grouping = group_dependencies(outdated, probe, include=include_deps, exclude=exclude_deps)

        plan: List[PlannedUpdate] = []
        for group in grouping.groups:
            if isinstance(group, SkippedGroup):
                plan.append(SkippedUpdate(group.names, group.reason))
            else:
                plan.append(build_command(group, manifest, cwd))
        return plan

    def list_touched_files(self, manifest_path: str) -> List[str]:
        manifest_path = os.path.abspath(manifest_path)
        return [
            manifest_path,
            os.path.join(os.path.dirname(manifest_path), LOCK_FILE_NAME),
        ]
