"""Dependency manifest parsing.

The mbgl-core-deps target writes mbgl-core-deps.txt: the transitive link
inputs of mbgl-core, one instruction per line. Tokens are separated by
whitespace or ';' (CMake list separator).

Grammar (version 1):
    -L<dir> | -L <dir>            search path
    -l<name>                      dynamic library
    -framework <Name>             Apple framework
    <path>/lib<name>.a            search path + static library
    <path>/<name>.lib             search path + static library
    <path>/lib<name>.so[.N...]    search path + dynamic library
    <path>/lib<name>[.N].dylib    search path + dynamic library
    <path>/lib<name>.tbd          search path + dynamic library
    -Wl,... -pthread -rdynamic    linker flags, ignored
    # comment, blank line         ignored

Relative paths are resolved against the build directory. Directives keep
manifest order, since a static library must precede the libraries that
resolve its undefined symbols, and duplicates are dropped.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple, Union

from ..errors import FilesystemError, ManifestParseError

logger = logging.getLogger(__name__)

MANIFEST_GRAMMAR_VERSION = 1

_TOKEN_SEPARATORS = re.compile(r"[\s;]+")
_SHARED_OBJECT = re.compile(r"^lib(?P<name>.+?)\.so(\.\d+)*$")
_DYLIB = re.compile(r"^lib(?P<name>.+?)(\.\d+)*\.(dylib|tbd)$")

# Linker flags that carry no library or search path
_IGNORED_FLAG_PREFIXES = ("-Wl,", "-pthread", "-rdynamic", "-static-lib")


class LinkKind(Enum):
    """How a library is linked."""

    STATIC = "static"
    DYLIB = "dylib"
    FRAMEWORK = "framework"


@dataclass(frozen=True)
class SearchPath:
    """Search this directory for libraries."""

    path: Path


@dataclass(frozen=True)
class LinkLibrary:
    """Link against the named library."""

    name: str
    kind: LinkKind


LinkDirective = Union[SearchPath, LinkLibrary]


class ManifestParser:
    """Parses manifest text into ordered, deduplicated link directives."""

    def __init__(self, build_dir: Path, strict: bool = True):
        """Initialize manifest parser.

        Args:
            build_dir: Directory relative paths in the manifest are relative to
            strict: Raise on unrecognized tokens instead of skipping them
        """
        self.build_dir = Path(build_dir)
        self.strict = strict

    def parse(self, text: str) -> List[LinkDirective]:
        """Parse manifest text.

        Args:
            text: Manifest contents

        Returns:
            Ordered, duplicate-free link directives

        Raises:
            ManifestParseError: In strict mode, for an unrecognized token
        """
        directives: List[LinkDirective] = []
        seen_paths: Set[Path] = set()
        seen_libs: Set[Tuple[str, LinkKind]] = set()

        for directive in self._iter_directives(text):
            if isinstance(directive, SearchPath):
                if directive.path in seen_paths:
                    continue
                seen_paths.add(directive.path)
            else:
                key = (directive.name, directive.kind)
                if key in seen_libs:
                    continue
                seen_libs.add(key)
            directives.append(directive)

        return directives

    def _iter_directives(self, text: str) -> Iterator[LinkDirective]:
        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            tokens = [t for t in _TOKEN_SEPARATORS.split(line) if t]
            i = 0
            while i < len(tokens):
                token = tokens[i]
                following = tokens[i + 1] if i + 1 < len(tokens) else None

                if token in ("-L", "-framework"):
                    if following is None:
                        self._reject(line_number, line, token)
                        i += 1
                        continue
                    if token == "-L":
                        yield SearchPath(self._resolve(following))
                    else:
                        yield LinkLibrary(following, LinkKind.FRAMEWORK)
                    i += 2
                    continue

                parsed = self._parse_token(token)
                if parsed is None:
                    self._reject(line_number, line, token)
                else:
                    yield from parsed
                i += 1

    def _parse_token(self, token: str) -> Optional[List[LinkDirective]]:
        """Translate one self-contained token; None if unrecognized."""
        if token.startswith("-L"):
            return [SearchPath(self._resolve(token[2:]))]
        if token.startswith("-l") and len(token) > 2 and not token.startswith("-l:"):
            return [LinkLibrary(token[2:], LinkKind.DYLIB)]
        if token.startswith(_IGNORED_FLAG_PREFIXES):
            return []

        filename = Path(token).name
        if filename.startswith("lib") and filename.endswith(".a") and len(filename) > 5:
            return self._library_file(token, filename[3:-2], LinkKind.STATIC)
        if filename.endswith(".lib") and len(filename) > 4:
            return self._library_file(token, filename[:-4], LinkKind.STATIC)

        match = _SHARED_OBJECT.match(filename) or _DYLIB.match(filename)
        if match:
            return self._library_file(token, match.group("name"), LinkKind.DYLIB)

        return None

    def _library_file(self, token: str, name: str, kind: LinkKind) -> List[LinkDirective]:
        path = self._resolve(token)
        return [SearchPath(path.parent), LinkLibrary(name, kind)]

    def _resolve(self, raw: str) -> Path:
        path = Path(raw)
        if not path.is_absolute():
            path = self.build_dir / path
        return path

    def _reject(self, line_number: int, line: str, token: str) -> None:
        if self.strict:
            raise ManifestParseError(line_number, line, token)
        logger.warning(
            f"Ignoring unrecognized manifest token {token!r} on line {line_number}"
        )


def parse_manifest(text: str, build_dir: Path, strict: bool = True) -> List[LinkDirective]:
    """Parse manifest text into link directives (see ManifestParser)."""
    return ManifestParser(build_dir, strict=strict).parse(text)


def read_manifest_file(path: Path) -> str:
    """Read a manifest as UTF-8 text.

    Raises:
        FilesystemError: If the file cannot be read or is not valid UTF-8
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FilesystemError(f"Failed to read {path}: {e}") from e
