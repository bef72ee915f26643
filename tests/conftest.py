"""Shared fixtures for mlnbuild tests."""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from mlnbuild.config import BuildConfig, RevisionPin
from mlnbuild.errors import ProcessFailureError
from mlnbuild.process import ProcessResult, ProcessRunner

PINNED_COMMIT = "0123456789abcdef0123456789abcdef01234567"


class FakeProcessRunner(ProcessRunner):
    """Records commands instead of running them.

    Responses are registered with on(); a response applies to a command when
    all of its tokens appear in the command. Newer registrations win.
    Unmatched `git -C <dir> rev-parse --show-toplevel` queries answer <dir>,
    as if every directory were the root of its own checkout.
    """

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[List[str], Optional[Path], Optional[Dict[str, str]]]] = []
        self._responses: List[Tuple[Tuple[str, ...], str, int, Optional[Callable]]] = []

    def on(
        self,
        *tokens: str,
        stdout: str = "",
        returncode: int = 0,
        action: Optional[Callable[[List[str], Optional[Path]], None]] = None,
    ) -> None:
        self._responses.append((tokens, stdout, returncode, action))

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = False,
    ) -> ProcessResult:
        cmd = [str(a) for a in args]
        self.calls.append((cmd, cwd, env))

        for tokens, stdout, returncode, action in reversed(self._responses):
            if all(token in cmd for token in tokens):
                if action is not None:
                    action(cmd, cwd)
                if returncode != 0:
                    raise ProcessFailureError(cmd, returncode, cwd=cwd, output="simulated failure")
                return ProcessResult(args=cmd, returncode=0, stdout=stdout)

        if cmd[:1] == ["git"] and cmd[-2:] == ["rev-parse", "--show-toplevel"]:
            return ProcessResult(args=cmd, returncode=0, stdout=cmd[2] + "\n")
        return ProcessResult(args=cmd, returncode=0)

    @property
    def commands(self) -> List[List[str]]:
        return [cmd for cmd, _cwd, _env in self.calls]

    def ran(self, *tokens: str) -> bool:
        return any(all(t in cmd for t in tokens) for cmd in self.commands)


@pytest.fixture
def fake_runner():
    """Process runner that never spawns processes."""
    return FakeProcessRunner()


@pytest.fixture
def pin():
    """A revision pin pointing at a local fake remote."""
    return RevisionPin(
        repository_url="https://example.com/maplibre-native.git",
        commit=PINNED_COMMIT,
        asset_url_template="https://example.com/releases/core-{revision}/{asset}",
    )


@pytest.fixture
def project_dir(tmp_path):
    """Empty project directory with a wrapper include dir."""
    project = tmp_path / "project"
    (project / "include").mkdir(parents=True)
    return project


@pytest.fixture
def make_config(project_dir, tmp_path):
    """Factory for BuildConfig instances rooted at project_dir."""

    def _make(**kwargs):
        kwargs.setdefault("cache_dir", tmp_path / "cache")
        kwargs.setdefault("compiler_launcher", None)
        return BuildConfig(project_dir=project_dir, **kwargs)

    return _make


def _make_source_tree(root: Path) -> Path:
    """Create a minimal MapLibre Native source tree."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "CMakeLists.txt").write_text("project(mbgl)\n")
    (root / "include" / "mbgl").mkdir(parents=True)
    (root / "platform" / "default" / "include").mkdir(parents=True)
    return root


@pytest.fixture
def make_source_tree():
    """Factory creating minimal source trees."""
    return _make_source_tree


@pytest.fixture
def source_tree(tmp_path):
    return _make_source_tree(tmp_path / "maplibre-native")
