"""CLI utility functions for mlnbuild.

This module provides common utilities used across CLI commands including:
- Logging setup
- Error handling and formatting
- Project path validation

Human-facing messages go to stderr; stdout is reserved for link directives.
"""

import logging
import sys
from pathlib import Path

from .errors import (
    ConfigurationError,
    DownloadError,
    MlnBuildError,
    ProcessFailureError,
    RevisionMismatchError,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Route mlnbuild logging to stderr.

    Args:
        verbose: Log at DEBUG instead of INFO
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Revision mismatch", "Build failed")
            message: Error message details
        """
        print(file=sys.stderr)
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}", file=sys.stderr)
        print(file=sys.stderr)
        print(message, file=sys.stderr)
        print(file=sys.stderr)

    @staticmethod
    def print_success(message: str) -> None:
        print(file=sys.stderr)
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def print_warning(message: str) -> None:
        print(f"{ErrorFormatter.YELLOW}! {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def title_for(error: MlnBuildError) -> str:
        """Short title for a build error."""
        if isinstance(error, RevisionMismatchError):
            return "Revision mismatch"
        if isinstance(error, ConfigurationError):
            return "Configuration error"
        if isinstance(error, ProcessFailureError):
            return "Command failed"
        if isinstance(error, DownloadError):
            return "Download failed"
        return "Build failed"

    @staticmethod
    def handle_build_error(error: MlnBuildError) -> None:
        """Report a fatal build error and exit with status 1.

        Args:
            error: The error to report
        """
        ErrorFormatter.print_error(ErrorFormatter.title_for(error), str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:", file=sys.stderr)
            print(traceback.format_exc(), file=sys.stderr)

        sys.exit(1)


class PathValidator:
    """Validates project paths and directories."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Validate that project directory exists and is a directory.

        Args:
            project_dir: Path to validate

        Raises:
            SystemExit: If path doesn't exist or isn't a directory
        """
        if not project_dir.exists():
            ErrorFormatter.print_error("Error", f"Path does not exist: {project_dir}")
            sys.exit(2)
        if not project_dir.is_dir():
            ErrorFormatter.print_error("Error", f"Path is not a directory: {project_dir}")
            sys.exit(2)
