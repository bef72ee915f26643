"""System dependency manifests for precompiled core libraries.

A downloaded core has no generated mbgl-core-deps.txt, so the libraries it
was linked against upstream are listed here in the same manifest grammar.
"""

from ..errors import UnsupportedTargetError
from ..models import RenderingBackend

_LINUX_COMMON = """\
-lcurl
-lpng
-ljpeg
-lwebp
-luv
-licuuc
-licui18n
-licudata
-lsqlite3
-lz
-lstdc++
"""

_MACOS_COMMON = """\
-lsqlite3
-lz
-lc++
-framework Foundation
-framework CoreFoundation
-framework CoreGraphics
-framework CoreText
-framework ImageIO
-framework Security
-framework SystemConfiguration
"""

_BACKEND_EXTRAS = {
    ("linux", RenderingBackend.OPENGL): "-lEGL\n-lGL\n",
    ("linux", RenderingBackend.VULKAN): "-ldl\n",
    ("macos", RenderingBackend.METAL): "-framework Metal\n-framework QuartzCore\n",
    ("macos", RenderingBackend.OPENGL): "-framework OpenGL\n",
    ("macos", RenderingBackend.VULKAN): "-framework QuartzCore\n",
}


def system_manifest(target: str, backend: RenderingBackend) -> str:
    """Manifest text for a precompiled core on target with backend.

    Args:
        target: Target identifier (e.g. 'linux-x64')
        backend: Rendering backend the core was built with

    Returns:
        Manifest text

    Raises:
        UnsupportedTargetError: If the target's platform family is unknown
    """
    family = target.split("-", 1)[0]
    if family == "linux":
        common = _LINUX_COMMON
    elif family == "macos":
        common = _MACOS_COMMON
    else:
        raise UnsupportedTargetError(f"No system dependency list for target '{target}'")
    return common + _BACKEND_EXTRAS.get((family, backend), "")
