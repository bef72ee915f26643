"""Configuration modules for mlnbuild."""

from .build_config import BuildConfig, BuildConfigLoader, parse_bool
from .pins import DEFAULT_PIN, MLN_GIT_REPO, MLN_REVISION, RevisionPin

__all__ = [
    "BuildConfig",
    "BuildConfigLoader",
    "parse_bool",
    "RevisionPin",
    "DEFAULT_PIN",
    "MLN_GIT_REPO",
    "MLN_REVISION",
]
