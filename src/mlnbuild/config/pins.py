"""Pinned upstream identifiers.

Updating MapLibre Native means editing MLN_REVISION here and re-running a
build against a vendored checkout at that commit.
"""

from dataclasses import dataclass

MLN_GIT_REPO = "https://github.com/maplibre/maplibre-native.git"
MLN_REVISION = "b3fc9a768831a5baada61ea523ab6db824241f7b"

# Release assets are published per core revision.
MLN_ASSET_URL_TEMPLATE = (
    "https://github.com/maplibre/maplibre-native/releases/download/"
    "core-{revision}/{asset}"
)


@dataclass(frozen=True)
class RevisionPin:
    """An exact upstream revision a build must match."""

    repository_url: str
    commit: str
    asset_url_template: str = MLN_ASSET_URL_TEMPLATE

    def asset_url(self, asset: str) -> str:
        """Release-asset URL for this revision.

        Args:
            asset: Asset filename (e.g. 'maplibre-native-headers.tar.gz')

        Returns:
            Fully qualified download URL
        """
        return self.asset_url_template.format(revision=self.commit, asset=asset)


DEFAULT_PIN = RevisionPin(repository_url=MLN_GIT_REPO, commit=MLN_REVISION)
