"""Executable update plan entries."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

@dataclass(frozen=True)
class UpdateCommand:
    """One package manager invocation plus the commit message describing it."""
    args: List[str]
    cwd: str
    description: str
    detailed_description: Optional[str] = None

@dataclass(frozen=True)
class SkippedUpdate:
    """A group the plan keeps in sequence but does not execute."""
    names: List[str] = field(default_factory=list)
    reason: str = ""

    @property
    def description(self) -> str:
        return f"Skip {', '.join(self.names)}: {self.reason}"

PlannedUpdate = Union[UpdateCommand, SkippedUpdate]

def executable(plan: List[PlannedUpdate]) -> List[UpdateCommand]:
    return [entry for entry in plan if isinstance(entry, UpdateCommand)]
