"""Shared utilities for pyupdeps tests."""

import json
import os
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pyupdeps.typing import CommandError

logger = logging.getLogger(__name__)

def write_manifest(directory: str, require: Optional[Dict[str, str]] = None,
                   require_dev: Optional[Dict[str, str]] = None, name: str = "composer.json") -> str:
    """Write a composer.json (and an empty lock file) and return its path."""
    os.makedirs(directory, exist_ok=True)
    data: Dict[str, object] = {"require": require or {}}
    if require_dev:
        data["require-dev"] = require_dev
    path = os.path.join(directory, name)
    with open(path, "w") as f:
        json.dump(data, f, indent=4)
    with open(os.path.join(directory, "composer.lock"), "w") as f:
        json.dump({"packages": []}, f)
    return path

def outdated_entry(name: str, version: str, latest: str) -> Dict[str, str]:
    return {
        "name": name,
        "version": version,
        "latest": latest,
        "latest-status": "update-possible",
        "description": f"{name} package",
    }

def blocking_line(requirer: str, version: str, package: str, constraint: str) -> str:
    return f"{requirer}  {version}  requires  {package} ({constraint})"

UpdateHook = Callable[[str, List[str]], None]

class ScriptedRunner:
    """Plays composer: canned outdated/why-not output, hooks for updates.

    Every call is recorded as (cwd, args, ignore_return_code, label).
    """

    def __init__(self, outdated: Optional[List[Dict[str, str]]] = None,
                 why_not: Optional[Dict[str, str]] = None,
                 on_update: Optional[UpdateHook] = None,
                 fail_on: Optional[str] = None):
        self.outdated = outdated or []
        self.why_not = why_not or {}
        self.on_update = on_update
        self.fail_on = fail_on
        self.calls: List[Tuple[str, List[str], bool, Optional[str]]] = []

    def run(self, cwd: str, args: Sequence[str], ignore_return_code: bool = False,
            label: Optional[str] = None) -> str:
        args = list(args)
        self.calls.append((cwd, args, ignore_return_code, label))
        sub = args[1] if len(args) > 1 else ""
        if self.fail_on and self.fail_on in args and sub in ("install", "update", "require"):
            raise CommandError(args, 2, f"Your requirements could not be resolved ({self.fail_on})")
        if sub == "install":
            return "Nothing to install, update or remove\n"
        if sub == "outdated":
            return json.dumps({"installed": self.outdated})
        if sub == "why-not":
            return self.why_not.get(args[2], f"There is no installed package depending on \"{args[2]}\"")
        if sub in ("update", "require"):
            if self.on_update is not None:
                self.on_update(cwd, args)
            return ""
        raise AssertionError(f"Unexpected command {args}")

    @property
    def commands(self) -> List[List[str]]:
        return [args for _, args, _, _ in self.calls]

    @property
    def update_commands(self) -> List[List[str]]:
        return [args for args in self.commands if args[1] in ("update", "require")]

def bump_lock(cwd: str, args: List[str]) -> None:
    """Update hook that rewrites composer.lock, like a real update would."""
    path = os.path.join(cwd, "composer.lock")
    with open(path) as f:
        lock = json.load(f)
    lock.setdefault("packages", []).append({"args": args[2:]})
    with open(path, "w") as f:
        json.dump(lock, f)
