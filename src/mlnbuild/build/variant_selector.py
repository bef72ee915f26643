"""Rendering backend selection.

Exactly one of metal, opengl or vulkan is compiled in. With no flag set the
platform default is used (metal on Apple platforms, vulkan elsewhere). When
several flags are set the conflict is resolved with a warning: opengl wins if
requested, otherwise the platform default.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..models import RenderingBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendSelection:
    """Chosen backend and the conflict warning, if any."""

    backend: RenderingBackend
    requested: List[RenderingBackend]
    warning: Optional[str] = None

    @property
    def discarded(self) -> List[RenderingBackend]:
        return [b for b in self.requested if b is not self.backend]


def platform_default(is_apple: bool) -> RenderingBackend:
    """Default backend for a platform family."""
    return RenderingBackend.METAL if is_apple else RenderingBackend.VULKAN


def select_backend(
    opengl: bool, metal: bool, vulkan: bool, is_apple: bool
) -> BackendSelection:
    """Choose one rendering backend from possibly conflicting flags.

    Never raises. For zero or one flag the result carries no warning; for two
    or more it carries exactly one warning naming the discarded options.

    Args:
        opengl: OpenGL requested
        metal: Metal requested
        vulkan: Vulkan requested
        is_apple: Whether the target is macOS/iOS

    Returns:
        BackendSelection
    """
    requested = [
        backend
        for backend, enabled in (
            (RenderingBackend.OPENGL, opengl),
            (RenderingBackend.METAL, metal),
            (RenderingBackend.VULKAN, vulkan),
        )
        if enabled
    ]

    if not requested:
        return BackendSelection(backend=platform_default(is_apple), requested=[])

    if len(requested) == 1:
        return BackendSelection(backend=requested[0], requested=requested)

    if RenderingBackend.OPENGL in requested:
        choice = RenderingBackend.OPENGL
    else:
        choice = platform_default(is_apple)

    discarded = ", ".join(f"'{b.value}'" for b in requested if b is not choice)
    warning = (
        "Features 'metal', 'opengl', and 'vulkan' are mutually exclusive. "
        + f"Using '{choice.value}' and ignoring {discarded}; "
        + "the selection defaults may change later."
    )
    logger.warning(warning)
    return BackendSelection(backend=choice, requested=requested, warning=warning)
