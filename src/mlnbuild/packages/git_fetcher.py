"""Remote fetcher for pinned MapLibre Native revisions.

Materializes exactly one commit plus its submodules without transferring the
project history:

    git init
    git remote add origin <repo>
    git fetch origin <commit> --depth=1
    git reset --hard FETCH_HEAD
    git submodule update --init --recursive --depth=1 --jobs=8
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from ..config.pins import RevisionPin
from ..errors import ProcessFailureError
from ..process import ProcessRunner
from .revision import RevisionValidator

logger = logging.getLogger(__name__)


class RemoteFetcher:
    """Clones a pinned revision with minimal data transfer."""

    # Parallel submodule fetches
    SUBMODULE_JOBS = 8

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        validator: Optional[RevisionValidator] = None,
    ):
        """Initialize remote fetcher.

        Args:
            runner: Process runner used for every git invocation
            validator: Revision validator used to detect a reusable clone
        """
        self.runner = runner or ProcessRunner()
        self.validator = validator or RevisionValidator(self.runner)

    def fetch(self, target_dir: Path, pin: RevisionPin) -> Path:
        """Clone pin.commit of pin.repository_url into target_dir.

        A previous clone at the pinned commit is reused. Any other content in
        target_dir is scratch data and is removed first.

        Args:
            target_dir: Directory to materialize the checkout in
            pin: Pinned repository and commit

        Returns:
            Path to the checkout

        Raises:
            ProcessFailureError: If any git step exits non-zero
        """
        target_dir = Path(target_dir)

        if self._is_pinned_clone(target_dir, pin):
            logger.info(f"Reusing clone of {pin.commit} in {target_dir}")
            return target_dir

        if target_dir.exists():
            logger.info(f"Discarding stale scratch checkout {target_dir}")
            shutil.rmtree(target_dir)

        logger.warning(
            f"Cloning {pin.repository_url} to {target_dir} for rev {pin.commit}"
        )

        self._git(target_dir, ["init"])
        self._git(target_dir, ["remote", "add", "origin", pin.repository_url])
        self._git(target_dir, ["fetch", "origin", pin.commit, "--depth=1"])
        self._git(target_dir, ["reset", "--hard", "FETCH_HEAD"])
        self._git(
            target_dir,
            [
                "submodule",
                "update",
                "--init",
                "--recursive",
                "--depth=1",
                f"--jobs={self.SUBMODULE_JOBS}",
            ],
        )
        return target_dir

    def _is_pinned_clone(self, target_dir: Path, pin: RevisionPin) -> bool:
        if not (target_dir / ".git").exists():
            return False
        try:
            return self.validator.read_head(target_dir) == pin.commit
        except ProcessFailureError as e:
            # An unborn or broken scratch repository is re-cloned below
            logger.debug(f"Cannot reuse {target_dir}: {e}")
            return False

    def _git(self, directory: Path, args: List[str]) -> None:
        directory.mkdir(parents=True, exist_ok=True)

        env = None
        git_dir = directory / ".git"
        if git_dir.exists():
            env = {"GIT_DIR": str(git_dir)}

        logger.info(f"Running git {' '.join(args)} in {directory}")
        self.runner.run(["git", *args], cwd=directory, env=env)
