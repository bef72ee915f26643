"""mlnbuild - acquire, build and link the MapLibre Native core."""

from .build import LinkEmitter, NativeBuildOrchestrator, NativeBuildResult
from .config import DEFAULT_PIN, BuildConfig, BuildConfigLoader, RevisionPin
from .errors import MlnBuildError
from .models import RenderingBackend

__version__ = "0.1.0"

__all__ = [
    "BuildConfig",
    "BuildConfigLoader",
    "RevisionPin",
    "DEFAULT_PIN",
    "NativeBuildOrchestrator",
    "NativeBuildResult",
    "LinkEmitter",
    "RenderingBackend",
    "MlnBuildError",
]
