"""Pinned-revision validation for local source trees."""

from pathlib import Path
from typing import Optional

from ..config.pins import RevisionPin
from ..errors import ConfigurationError, ProcessFailureError, RevisionMismatchError
from ..process import ProcessRunner

# Whitespace git may put around rev-parse output. The pin itself is never trimmed.
_ASCII_WHITESPACE = " \t\n\r\x0c"


def is_populated_dir(directory: Path) -> bool:
    """Whether directory exists and contains at least one entry."""
    if not directory.is_dir():
        return False
    return any(directory.iterdir())


_SUBMODULE_HINT = "did you forget to run `git submodule update --init --recursive`?"


class RevisionValidator:
    """Confirms a source tree's git HEAD matches a pinned commit."""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self.runner = runner or ProcessRunner()

    def read_head(self, directory: Path) -> str:
        """Return the trimmed HEAD commit of the repository at directory.

        Raises:
            ProcessFailureError: If git cannot resolve HEAD
        """
        result = self.runner.run(
            ["git", "-C", str(directory), "rev-parse", "HEAD"],
            capture_output=True,
        )
        return result.stdout.strip(_ASCII_WHITESPACE)

    def is_repository_root(self, directory: Path) -> bool:
        """Whether directory is the top level of its own git work tree.

        git searches parent directories for a repository, so a plain
        directory inside another checkout would otherwise report the
        enclosing project's HEAD.
        """
        try:
            result = self.runner.run(
                ["git", "-C", str(directory), "rev-parse", "--show-toplevel"],
                capture_output=True,
            )
        except ProcessFailureError as e:
            if e.returncode is None:
                raise
            return False
        toplevel = result.stdout.strip(_ASCII_WHITESPACE)
        return bool(toplevel) and Path(toplevel).resolve() == directory.resolve()

    def validate(self, directory: Path, pin: RevisionPin) -> str:
        """Validate that directory is checked out at the pinned commit.

        Args:
            directory: Source tree (vendored checkout or clone)
            pin: Pinned revision

        Returns:
            The validated commit hash

        Raises:
            ConfigurationError: If directory is missing, empty or not a checkout root
            RevisionMismatchError: If HEAD differs from the pin
            ProcessFailureError: If git fails
        """
        directory = Path(directory)
        if not is_populated_dir(directory):
            raise ConfigurationError(
                f"{directory} is missing or empty, {_SUBMODULE_HINT}"
            )
        if not self.is_repository_root(directory):
            raise ConfigurationError(
                f"{directory} is not the root of a git checkout, {_SUBMODULE_HINT}"
            )

        actual = self.read_head(directory)
        if actual != pin.commit:
            raise RevisionMismatchError(directory, pin.commit, actual)
        return actual
