"""Error taxonomy for mlnbuild.

Every error raised by this package is fatal for the build: nothing here is
retried or partially recovered. Each message names the offending path,
command or value and, where possible, what the operator should do next.
"""

from pathlib import Path
from typing import List, Optional, Sequence


class MlnBuildError(Exception):
    """Base class for all mlnbuild errors."""

    pass


class ConfigurationError(MlnBuildError):
    """Raised for invalid configuration (bad override path, bad env value, ...)."""

    pass


class UnsupportedTargetError(ConfigurationError):
    """Raised when no precompiled artifact exists for the host platform/architecture."""

    pass


class RevisionMismatchError(MlnBuildError):
    """Raised when a source tree's HEAD does not match the pinned commit."""

    def __init__(self, directory: Path, expected: str, actual: str):
        self.directory = directory
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Unexpected git revision in {directory}\n"
            + f"Expected: {expected!r}\n"
            + f"Got: {actual!r}\n"
            + f"Update the pinned revision to {actual!r}, "
            + f"or check out {expected!r} in {directory}."
        )


class ProcessFailureError(MlnBuildError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int],
        cwd: Optional[Path] = None,
        output: str = "",
        reason: Optional[str] = None,
    ):
        self.command: List[str] = [str(a) for a in args]
        self.returncode = returncode
        self.cwd = cwd
        self.output = output

        message = f"Failed to run {' '.join(self.command)}"
        if cwd is not None:
            message += f" in {cwd}"
        if reason:
            message += f": {reason}"
        elif returncode is not None:
            message += f": exit status {returncode}"
        if output:
            message += f"\n{output.rstrip()}"
        super().__init__(message)


class DownloadError(MlnBuildError):
    """Raised when an artifact download fails."""

    pass


class ExtractionError(MlnBuildError):
    """Raised when archive extraction fails."""

    pass


class FilesystemError(MlnBuildError):
    """Raised for filesystem problems (unreadable manifest, missing output)."""

    pass


class MissingOutputError(FilesystemError):
    """Raised when a build reported success but its expected output is absent."""

    def __init__(self, expected_path: Path, target: str):
        self.expected_path = expected_path
        self.target = target
        super().__init__(
            f"Failed to read {expected_path}: target '{target}' finished "
            + "but did not produce this file"
        )


class ManifestParseError(MlnBuildError):
    """Raised in strict mode for a manifest token the grammar does not recognize."""

    def __init__(self, line_number: int, line: str, token: str):
        self.line_number = line_number
        self.line = line
        self.token = token
        super().__init__(
            f"Unrecognized token {token!r} on manifest line {line_number}: {line!r}"
        )
