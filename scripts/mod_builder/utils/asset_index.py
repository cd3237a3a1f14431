"""
Asset index collaborator.

Editors keep an index of project assets that refreshes when files change.
A build copies and deletes files in the project, so it holds the index's
auto-refresh off for its whole duration.
"""

import logging
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


class AssetIndex:
    """Interface of the external asset index. The base implementation does nothing."""

    def disallow_auto_refresh(self) -> None:
        pass

    def allow_auto_refresh(self) -> None:
        pass

    def reimport(self, path: Path) -> None:
        """Ask the index to synchronously reprocess one asset."""
        pass


class NullAssetIndex(AssetIndex):
    """Asset index used outside an editor; tracks lock depth and requested reimports."""

    def __init__(self):
        self.lock_depth = 0
        self.reimported = []

    def disallow_auto_refresh(self) -> None:
        self.lock_depth += 1

    def allow_auto_refresh(self) -> None:
        self.lock_depth = max(0, self.lock_depth - 1)

    def reimport(self, path: Path) -> None:
        self.reimported.append(Path(path))

    @property
    def locked(self) -> bool:
        return self.lock_depth > 0


@contextmanager
def refresh_lock(index: AssetIndex):
    """Hold the index's auto-refresh off; always released, even on error."""
    index.disallow_auto_refresh()
    try:
        yield index
    finally:
        index.allow_auto_refresh()


def request_reimport(index: AssetIndex, paths) -> int:
    """
    Ask the index to reimport assets, ignoring failures.

    Returns:
        Number of assets the index accepted
    """
    accepted = 0
    for path in paths:
        try:
            index.reimport(path)
            accepted += 1
        except Exception as e:
            logger.warning(f"Reimport of {path} failed: {e}")
    return accepted
