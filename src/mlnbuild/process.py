"""Process runner.

All external commands (git, cmake) go through :class:`ProcessRunner` so the
build stages never call :mod:`subprocess` directly and tests can substitute a
fake runner.

Design:
    - Wraps subprocess.run without an in-process timeout
    - Merges extra environment variables over the current environment
    - Raises ProcessFailureError on any non-zero exit or missing executable
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import ProcessFailureError

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of a completed external command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""


class ProcessRunner:
    """Runs external commands and fails fast on non-zero exit."""

    def __init__(self, verbose: bool = False):
        """Initialize process runner.

        Args:
            verbose: Log every command before it runs
        """
        self.verbose = verbose

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = False,
    ) -> ProcessResult:
        """Run a command to completion.

        Args:
            args: Command and arguments
            cwd: Working directory
            env: Extra environment variables, layered over os.environ
            capture_output: Capture stdout/stderr instead of inheriting them

        Returns:
            ProcessResult for the successful command

        Raises:
            ProcessFailureError: If the command cannot start or exits non-zero
        """
        cmd = [str(a) for a in args]
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        if self.verbose:
            logger.info(f"Running {' '.join(cmd)}" + (f" in {cwd}" if cwd else ""))
        else:
            logger.debug(f"Running {' '.join(cmd)}" + (f" in {cwd}" if cwd else ""))

        try:
            completed = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                env=full_env,
                capture_output=capture_output,
                text=True,
            )
        except OSError as e:
            raise ProcessFailureError(cmd, None, cwd=cwd, reason=str(e)) from e

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        if completed.returncode != 0:
            raise ProcessFailureError(
                cmd, completed.returncode, cwd=cwd, output=stderr or stdout
            )

        return ProcessResult(
            args=cmd, returncode=completed.returncode, stdout=stdout, stderr=stderr
        )
