"""
Command-line interface for mlnbuild.

This module provides the `mlnbuild` CLI tool for resolving and building the
MapLibre Native core and printing the link directives for it.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from mlnbuild import __version__
from mlnbuild.build import (
    LinkEmitter,
    NativeBuildOrchestrator,
    parse_manifest,
    read_manifest_file,
)
from mlnbuild.build.link_emitter import FORMATS
from mlnbuild.cli_utils import ErrorFormatter, PathValidator, setup_logging
from mlnbuild.config import BuildConfig, BuildConfigLoader
from mlnbuild.errors import FilesystemError, MlnBuildError
from mlnbuild.packages import Cache


@dataclass
class BuildArgs:
    """Arguments for the build and resolve commands."""

    project_dir: Path
    source_dir: Optional[Path] = None
    force_clone: bool = False
    opengl: bool = False
    metal: bool = False
    vulkan: bool = False
    profile: Optional[str] = None
    skip_build: bool = False
    strict: Optional[bool] = None
    fmt: str = "cargo"
    output: Optional[Path] = None
    verbose: bool = False


@dataclass
class DepsArgs:
    """Arguments for the deps command."""

    manifest: Path
    build_dir: Path
    strict: bool = True
    fmt: str = "cargo"


@dataclass
class CleanArgs:
    """Arguments for the clean command."""

    project_dir: Path
    verbose: bool = False


def load_config(args: BuildArgs) -> BuildConfig:
    """Layer command-line flags over mlnbuild.ini and the environment.

    Flags that were not given are left to the lower layers.
    """
    overrides: Dict[str, Any] = {
        "source_dir": args.source_dir,
        "force_clone": True if args.force_clone else None,
        "opengl": True if args.opengl else None,
        "metal": True if args.metal else None,
        "vulkan": True if args.vulkan else None,
        "build_profile": args.profile,
        "skip_build": True if args.skip_build else None,
        "strict_manifest": args.strict,
    }
    return BuildConfigLoader.load(args.project_dir, overrides=overrides)


def write_lines(lines: List[str], output: Optional[Path]) -> None:
    if output is None:
        for line in lines:
            print(line)
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Failed to write {output}: {e}") from e


def build_command(args: BuildArgs) -> None:
    """Resolve, build and print link directives.

    Examples:
        mlnbuild build                      # Build with auto-detected source
        mlnbuild build --vulkan             # Force the Vulkan backend
        mlnbuild build --source-dir ../mln  # Use a local checkout verbatim
        mlnbuild build --format flags       # Print -L/-l flags
    """
    try:
        config = load_config(args)
        orchestrator = NativeBuildOrchestrator(config, verbose=args.verbose)
        result = orchestrator.build()

        emitter = LinkEmitter(args.fmt)
        write_lines(emitter.render(result.emission_order()), args.output)

        if result.stub:
            ErrorFormatter.print_warning("Native build skipped (stub marker written)")
        else:
            ErrorFormatter.print_success(
                f"Built MapLibre Native core ({result.backend}) in {result.build_time:.2f}s"
            )
            if args.verbose:
                print(f"Library: {result.library_file}", file=sys.stderr)
                print("Include directories:", file=sys.stderr)
                for include_dir in result.include_dirs:
                    print(f"  {include_dir}", file=sys.stderr)
        sys.exit(0)

    except MlnBuildError as e:
        ErrorFormatter.handle_build_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def resolve_command(args: BuildArgs) -> None:
    """Resolve the MapLibre Native source and print where it is."""
    try:
        config = load_config(args)
        orchestrator = NativeBuildOrchestrator(config, verbose=args.verbose)
        location = orchestrator.resolve()
        print(f"{location.kind.value}\t{_location_path(location)}")
        sys.exit(0)

    except MlnBuildError as e:
        ErrorFormatter.handle_build_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def deps_command(args: DepsArgs) -> None:
    """Parse an existing mbgl-core-deps.txt and print its link directives."""
    try:
        text = read_manifest_file(args.manifest)
        directives = parse_manifest(text, args.build_dir, strict=args.strict)
        write_lines(LinkEmitter(args.fmt).render(directives), None)
        sys.exit(0)

    except MlnBuildError as e:
        ErrorFormatter.handle_build_error(e)


def clean_command(args: CleanArgs) -> None:
    """Remove retained CMake build directories."""
    try:
        config = BuildConfigLoader.load(args.project_dir)
        cache = Cache(config.project_dir, cache_root=config.cache_dir)
        cache.clean_build()
        ErrorFormatter.print_success(f"Removed {cache.build_root}")
        sys.exit(0)

    except MlnBuildError as e:
        ErrorFormatter.handle_build_error(e)


def _location_path(location: Any) -> Path:
    return getattr(location, "path", None) or location.library_file


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        default=None,
        help="Use this MapLibre Native checkout verbatim (skips revision check)",
    )
    parser.add_argument(
        "--force-clone",
        action="store_true",
        help="Always clone the pinned revision into the cache",
    )
    parser.add_argument("--opengl", action="store_true", help="Build the OpenGL backend")
    parser.add_argument("--metal", action="store_true", help="Build the Metal backend")
    parser.add_argument("--vulkan", action="store_true", help="Build the Vulkan backend")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="mlnbuild",
        description="Resolve, build and link the MapLibre Native core",
    )
    parser.add_argument("--version", action="version", version=f"mlnbuild {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build the native core and print link directives",
    )
    _add_source_arguments(build_parser)
    build_parser.add_argument(
        "--profile",
        default=None,
        help="CMake build type (default: $MLN_BUILD_PROFILE or Release)",
    )
    build_parser.add_argument(
        "--skip-build",
        action="store_true",
        help="Write a stub marker instead of building (documentation builds)",
    )
    strict_group = build_parser.add_mutually_exclusive_group()
    strict_group.add_argument(
        "--strict",
        dest="strict",
        action="store_const",
        const=True,
        default=None,
        help="Fail on unrecognized manifest tokens",
    )
    strict_group.add_argument(
        "--lenient",
        dest="strict",
        action="store_const",
        const=False,
        help="Warn about and skip unrecognized manifest tokens",
    )
    build_parser.add_argument(
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="cargo",
        help="Directive syntax (default: cargo)",
    )
    build_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write directives to this file instead of stdout",
    )

    # Resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve the MapLibre Native source without building",
    )
    _add_source_arguments(resolve_parser)

    # Deps command
    deps_parser = subparsers.add_parser(
        "deps",
        help="Convert an mbgl-core-deps.txt manifest into link directives",
    )
    deps_parser.add_argument("manifest", type=Path, help="Path to mbgl-core-deps.txt")
    deps_parser.add_argument(
        "--build-dir",
        type=Path,
        default=None,
        help="Directory relative manifest paths refer to (default: manifest's directory)",
    )
    deps_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Warn about and skip unrecognized tokens",
    )
    deps_parser.add_argument(
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="cargo",
        help="Directive syntax (default: cargo)",
    )

    # Clean command
    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove retained CMake build directories",
    )
    clean_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )

    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(getattr(parsed_args, "verbose", False))

    if hasattr(parsed_args, "project_dir"):
        PathValidator.validate_project_dir(parsed_args.project_dir)

    if parsed_args.command in ("build", "resolve"):
        build_args = BuildArgs(
            project_dir=parsed_args.project_dir,
            source_dir=parsed_args.source_dir,
            force_clone=parsed_args.force_clone,
            opengl=parsed_args.opengl,
            metal=parsed_args.metal,
            vulkan=parsed_args.vulkan,
            verbose=parsed_args.verbose,
        )
        if parsed_args.command == "build":
            build_args.profile = parsed_args.profile
            build_args.skip_build = parsed_args.skip_build
            build_args.strict = parsed_args.strict
            build_args.fmt = parsed_args.fmt
            build_args.output = parsed_args.output
            build_command(build_args)
        else:
            resolve_command(build_args)
    elif parsed_args.command == "deps":
        deps_args = DepsArgs(
            manifest=parsed_args.manifest,
            build_dir=parsed_args.build_dir or parsed_args.manifest.parent,
            strict=not parsed_args.lenient,
            fmt=parsed_args.fmt,
        )
        deps_command(deps_args)
    elif parsed_args.command == "clean":
        clean_command(CleanArgs(project_dir=parsed_args.project_dir))


if __name__ == "__main__":
    main()
