"""Running package manager commands."""

import os
import shlex
import subprocess
import sys
import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from ..typing import CommandError

logger = logging.getLogger(__name__)

def in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS", "").lower() == "true"

@contextmanager
def log_group(label: str) -> Iterator[None]:
    """Fold everything logged inside into one collapsible group.

    Uses workflow commands on GitHub Actions, a plain header line elsewhere.
    """
    if in_github_actions():
        print(f"::group::{label}", file=sys.stdout, flush=True)
        try:
            yield
        finally:
            print("::endgroup::", file=sys.stdout, flush=True)
    else:
        logger.info(f"── {label}")
        yield

class ProcessRunner:
    """Runs external commands and captures their output."""

    def __init__(self, env: Optional[dict] = None):
        self.env = env

    def run(self, cwd: str, args: Sequence[str], ignore_return_code: bool = False,
            label: Optional[str] = None) -> str:
        """Run a command and return its stdout, or stderr if stdout is empty.

        Raises CommandError on a non-zero exit unless ignore_return_code is set.
        """
        if label:
            with log_group(label):
                return self._run(cwd, args, ignore_return_code)
        return self._run(cwd, args, ignore_return_code)

    def _run(self, cwd: str, args: Sequence[str], ignore_return_code: bool) -> str:
        if not args:
            raise ValueError("Empty command")
        logger.info(f"> {shlex.join(args)}")
        env = None
        if self.env is not None:
            env = {**os.environ, **self.env}
        try:
            result = subprocess.run(
                list(args), cwd=cwd, env=env,
                capture_output=True, text=True, check=False
            )
        except FileNotFoundError:
            raise CommandError(args, 127, f"{args[0]}: command not found")
        if result.stdout.strip():
            logger.debug(f"Command output: {result.stdout.strip()}")
        if result.stderr.strip():
            logger.debug(f"Command stderr: {result.stderr.strip()}")
        output = result.stdout if result.stdout != "" else result.stderr
        if result.returncode != 0 and not ignore_return_code:
            raise CommandError(args, result.returncode, output)
        return output

