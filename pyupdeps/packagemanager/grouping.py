"""Grouping outdated dependencies into atomic update units.

Upgrading a dependency can be blocked because its new version requires a
newer version of another outdated direct dependency. Such dependencies have
to be updated together, in one package manager invocation and one commit.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# "requirer version requires blocked-package (constraint)"
BLOCKING_LINE_RE = re.compile(
    r'^\s*([a-zA-Z0-9._-]+/[a-zA-Z0-9._-]+)\s+([a-zA-Z0-9._-]+)\s+requires\s+'
    r'([a-zA-Z0-9._-]+/[a-zA-Z0-9._-]+)\s+\(([^()]+)\)'
)

@dataclass(frozen=True)
class Dependency:
    """An outdated direct dependency."""
    name: str
    version: str
    latest: str
    is_dev: bool = False

@dataclass(frozen=True)
class BlockingRequirement:
    requirer: str
    requirer_version: str
    package: str
    constraint: str

@dataclass(frozen=True)
class ConflictEdge:
    """Upgrading ``dependent`` is blocked by its requirement on ``blocking``."""
    dependent: str
    blocking: str

@dataclass
class UpdateGroup:
    """Dependencies that must be updated together; the first one is the key."""
    members: List[Dependency]

    @property
    def key(self) -> str:
        return self.members[0].name

    @property
    def is_dev(self) -> bool:
        return self.members[0].is_dev

    @property
    def names(self) -> List[str]:
        return [m.name for m in self.members]

    def __len__(self) -> int:
        return len(self.members)

@dataclass
class SkippedGroup:
    """A group that cannot be updated automatically."""
    members: List[Dependency]
    reason: str

    @property
    def names(self) -> List[str]:
        return [m.name for m in self.members]

GroupResult = Union[UpdateGroup, SkippedGroup]
BlockingProbe = Callable[[Dependency], str]

@dataclass
class Grouping:
    groups: List[GroupResult] = field(default_factory=list)
    edges: List[ConflictEdge] = field(default_factory=list)

    @property
    def valid_groups(self) -> List[UpdateGroup]:
        return [g for g in self.groups if isinstance(g, UpdateGroup)]

def parse_blocking_report(text: str) -> List[BlockingRequirement]:
    """Parse the structured lines of a blocking probe report."""
    requirements: List[BlockingRequirement] = []
    for line in text.splitlines():
        match = BLOCKING_LINE_RE.match(line)
        if match is None:
            continue
        requirements.append(BlockingRequirement(
            requirer=match.group(1),
            requirer_version=match.group(2),
            package=match.group(3),
            constraint=match.group(4).strip(),
        ))
    return requirements

def filter_dependencies(dependencies: Iterable[Dependency],
                        include: Optional[Sequence[str]] = None,
                        exclude: Optional[Sequence[str]] = None) -> List[Dependency]:
    """Apply the include allow-list (when non-empty) and the exclude list."""
    include_set = set(include or [])
    exclude_set = set(exclude or [])
    result: List[Dependency] = []
    for dependency in dependencies:
        if include_set and dependency.name not in include_set:
            continue
        if dependency.name in exclude_set:
            continue
        result.append(dependency)
    return result

def group_dependencies(outdated: Sequence[Dependency], probe: BlockingProbe,
                       include: Optional[Sequence[str]] = None,
                       exclude: Optional[Sequence[str]] = None) -> Grouping:
    """Partition outdated dependencies into atomic update groups.

    ``outdated`` is the full outdated report; blocked packages are looked up
    in it even when the include/exclude filters removed them as candidates.
    Groups keep the report's order.
    """
    by_name: Dict[str, Dependency] = {d.name: d for d in outdated}
    grouping = Grouping()
    conflicting: List[str] = []
    tentative: Dict[str, List[Dependency]] = {}

    for dependency in filter_dependencies(outdated, include, exclude):
        members = [dependency]
        for requirement in parse_blocking_report(probe(dependency)):
            if requirement.requirer != dependency.name:
                continue
            blocking = by_name.get(requirement.package)
            if blocking is None or blocking.name == dependency.name:
                continue
            logger.debug(f"{dependency.name} {dependency.latest} is blocked by "
                         f"{blocking.name} ({requirement.constraint})")
            grouping.edges.append(ConflictEdge(dependency.name, blocking.name))
            if blocking.name not in conflicting:
                conflicting.append(blocking.name)
            if blocking not in members:
                members.append(blocking)
        tentative[dependency.name] = members

    for key, members in tentative.items():
        # Updated as a member of another group instead
        if key in conflicting:
            logger.debug(f"{key} is updated together with the package that requires it")
            continue
        if len({m.is_dev for m in members}) > 1:
            names = ", ".join(m.name for m in members)
            logger.warning(f"Grouped --dev + --no-dev dependencies can't be updated automatically: {names}")
            grouping.groups.append(SkippedGroup(members, "mixes dev and non-dev dependencies"))
            continue
        grouping.groups.append(UpdateGroup(members))

    return grouping
