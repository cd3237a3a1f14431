"""
Incremental build support: content hashing, the hash ledger and the
decision whether previously built bundles can be reused.
"""

import hashlib
import logging
from pathlib import Path
from typing import Collection, List, Optional

from ..config import BuilderConfig, ModAsset, ModBuilderSettings
from .discovery import discover_assets, has_extension, relative_asset_path

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 64 * 1024


def hash_file(path: Path) -> str:
    """Return the SHA-256 digest of a file as upper-case hex, streaming its content."""
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b''):
            digest.update(chunk)
    return digest.hexdigest().upper()


def is_ledger_excluded(asset: Path, config: BuilderConfig, settings_file: Optional[Path] = None) -> bool:
    """
    Check whether an asset is kept out of the hash ledger.

    Scripts, libraries and assembly definitions are handled by their own
    categories, and metadata objects (builder settings) change on every
    build, so none of them may invalidate the bundle cache.
    """
    asset = Path(asset)
    if has_extension(asset, config.ledger_excluded_extensions):
        return True

    if asset.name in config.metadata_file_names:
        return True

    if settings_file is not None and asset.resolve() == Path(settings_file).resolve():
        return True

    return False


class ChangeDetector:
    """Decides whether bundle outputs from the last build are still valid."""

    def __init__(self, config: BuilderConfig):
        self.config = config

    def has_changes(self, settings: ModBuilderSettings, asset_paths: List[Path]) -> bool:
        """
        Check the discovered assets against the hash ledger.

        Returns:
            True if bundles must be rebuilt, False if the cached ones can be reused
        """
        if settings.build_linux != settings.last_build_linux:
            logger.info("Target platforms changed since last build, cannot cache bundles!")
            return True

        mod_directory = settings.mod_directory
        ledger = {entry.path: entry.hash for entry in settings.assets}
        seen = set()

        for asset in asset_paths:
            if is_ledger_excluded(asset, self.config, settings.source_file):
                continue

            relative_path = relative_asset_path(asset, mod_directory)
            seen.add(relative_path)
            recorded_hash = ledger.get(relative_path)
            if not recorded_hash:
                logger.info(f"Not found: {relative_path}")
                logger.info("Some files were renamed/moved, cannot cache bundles!")
                return True

            if recorded_hash != hash_file(asset):
                logger.info(f"Changed: {relative_path}")
                logger.info("Found changed files, cannot cache bundles!")
                return True

        removed = sorted(set(ledger) - seen)
        if removed:
            logger.info(f"Removed: {removed[0]}")
            logger.info("Some files were deleted, cannot cache bundles!")
            return True

        logger.info("Caching bundles!")
        return False

    def bundles_present(self, install_directory: Path) -> bool:
        """
        Check that a previous bundle output exists to be reused.

        A missing or empty bundle folder means the last build output was
        removed or never produced, so the cache must not be trusted.
        """
        bundle_directory = Path(install_directory) / self.config.bundles_folder
        if not bundle_directory.is_dir():
            logger.info(f"No bundle output at {bundle_directory}, cannot cache bundles!")
            return False

        if not any(path.is_file() for path in bundle_directory.iterdir()):
            logger.info(f"Bundle output at {bundle_directory} is empty, cannot cache bundles!")
            return False

        return True

    def compute_ledger(
        self,
        mod_directory: Path,
        settings_file: Optional[Path] = None,
        skip: Collection[Path] = (),
    ) -> List[ModAsset]:
        """
        Rescan the source tree and hash every ledger-eligible file.

        Args:
            mod_directory: Mod source root
            settings_file: Settings file to leave out of the ledger
            skip: Paths to leave out, e.g. temporary preprocessor files

        Returns:
            Fresh ledger entries, sorted by relative path
        """
        skipped = {Path(path).resolve() for path in skip}
        ledger = []

        for asset in discover_assets(mod_directory):
            if asset in skipped:
                continue
            if is_ledger_excluded(asset, self.config, settings_file):
                continue

            ledger.append(ModAsset(path=relative_asset_path(asset, mod_directory), hash=hash_file(asset)))

        return ledger
