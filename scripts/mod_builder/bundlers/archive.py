"""
Archive bundler: packs assets into a deterministic zip file per target.
"""

import os
import json
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import AssetBundler, BuildTarget, BundleResult

logger = logging.getLogger(__name__)

# Fixed timestamp so identical inputs produce identical archives
ARCHIVE_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class ArchiveBundler(AssetBundler):
    """
    Bundles assets into a zip archive.

    Entries are named relative to the common root of the mod (``root`` in the
    config, or the assets' common parent), written in sorted order with a
    fixed timestamp. A JSON build log is written beside the bundle; the
    pipeline removes it after a successful build.
    """

    name = "archive"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.log_file = self.config.get("log_file", "buildlogtep.json")
        self.compression = zipfile.ZIP_DEFLATED if self.config.get("compress", True) else zipfile.ZIP_STORED

    def _archive_root(self, assets: List[Path]) -> Path:
        if self.config.get("root"):
            return Path(self.config["root"]).resolve()
        parents = [str(Path(asset).resolve().parent) for asset in assets]
        return Path(os.path.commonpath(parents))

    def build_bundles(self, target: BuildTarget, output_dir: Path, bundle_name: str,
                      assets: List[Path]) -> BundleResult:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        bundle_path = output_dir / bundle_name

        root = self._archive_root(assets)
        entries = sorted((Path(asset).resolve().relative_to(root).as_posix(), Path(asset)) for asset in assets)

        try:
            with zipfile.ZipFile(bundle_path, 'w', compression=self.compression) as archive:
                for arcname, asset in entries:
                    info = zipfile.ZipInfo(arcname, date_time=ARCHIVE_DATE_TIME)
                    info.compress_type = self.compression
                    info.external_attr = 0o644 << 16
                    archive.writestr(info, asset.read_bytes())
        except OSError as e:
            return BundleResult(success=False, message=f"Failed to write {bundle_path}: {e}")

        with open(output_dir / self.log_file, 'w', encoding='utf-8') as f:
            json.dump({
                "target": target.name,
                "build_target": target.build_target,
                "bundle": bundle_name,
                "assets": [arcname for arcname, _ in entries],
            }, f, indent=2)

        logger.debug(f"Wrote {bundle_path} with {len(entries)} entries")
        return BundleResult(success=True, files=[bundle_path.resolve()], message=f"Built {bundle_name}")
