"""Package manager backends."""

from typing import List, Protocol, Sequence, runtime_checkable

from .command import PlannedUpdate, SkippedUpdate, UpdateCommand, executable
from ..typing import ProcessRunnerProtocol, UnsupportedPackageManagerError

@runtime_checkable
class PackageManager(Protocol):
    """What the updater needs from a package manager backend."""
    def list_update_groups(self, exclude_deps: Sequence[str], include_deps: Sequence[str],
                           manifest_path: str) -> List[PlannedUpdate]:
        """Ordered update plan for the manifest."""
        ...

    def list_touched_files(self, manifest_path: str) -> List[str]:
        """Files an update may rewrite: the manifest and its lock file."""
        ...

def get_package_manager(package_manager_type: str, runner: ProcessRunnerProtocol) -> PackageManager:
    """Select the backend for a configured package manager type."""
    from .composer import ComposerPackageManager

    if package_manager_type == 'composer':
        return ComposerPackageManager(runner)

    raise UnsupportedPackageManagerError(package_manager_type)

__all__ = [
    'PackageManager',
    'PlannedUpdate',
    'SkippedUpdate',
    'UpdateCommand',
    'executable',
    'get_package_manager',
]
