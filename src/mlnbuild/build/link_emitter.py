"""Rendering of link directives in the host toolchain's syntax.

Supported formats:
    cargo  cargo:rustc-link-search=native=<dir> / cargo:rustc-link-lib=<kind>=<name>
    flags  -L<dir> / -l<name> / -framework <Name>
    json   one JSON document describing every directive
"""

import json
from typing import Dict, List, Sequence, TextIO

from .manifest_parser import LinkDirective, LinkKind, LinkLibrary, SearchPath

FORMATS = ("cargo", "flags", "json")


def _cargo(directive: LinkDirective) -> str:
    if isinstance(directive, SearchPath):
        return f"cargo:rustc-link-search=native={directive.path}"
    return f"cargo:rustc-link-lib={directive.kind.value}={directive.name}"


def _flags(directive: LinkDirective) -> str:
    if isinstance(directive, SearchPath):
        return f"-L{directive.path}"
    if directive.kind is LinkKind.FRAMEWORK:
        return f"-framework {directive.name}"
    return f"-l{directive.name}"


def directive_to_dict(directive: LinkDirective) -> Dict[str, str]:
    if isinstance(directive, SearchPath):
        return {"type": "search", "path": str(directive.path)}
    if isinstance(directive, LinkLibrary):
        return {"type": "lib", "name": directive.name, "kind": directive.kind.value}
    raise TypeError(f"Not a link directive: {directive!r}")


class LinkEmitter:
    """Writes link directives for the final link step."""

    def __init__(self, fmt: str = "cargo"):
        if fmt not in FORMATS:
            raise ValueError(f"Unknown directive format '{fmt}'. Use one of {', '.join(FORMATS)}")
        self.fmt = fmt

    def render(self, directives: Sequence[LinkDirective]) -> List[str]:
        """Render directives as output lines, preserving order."""
        if self.fmt == "json":
            return [json.dumps([directive_to_dict(d) for d in directives], indent=2)]
        if self.fmt == "flags":
            return [_flags(d) for d in directives]
        return [_cargo(d) for d in directives]

    def emit(self, directives: Sequence[LinkDirective], stream: TextIO) -> None:
        for line in self.render(directives):
            stream.write(line + "\n")
