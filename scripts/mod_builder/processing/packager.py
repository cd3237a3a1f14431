"""
Packaging transforms: direct copies into the install directory and
orchestration of the external bundler.
"""

import shutil
import logging
from pathlib import Path
from typing import List

from ..bundlers.base import AssetBundler, BuildTarget
from .discovery import relative_asset_path
from .router import RoutedFile

logger = logging.getLogger(__name__)


def clean_install_directory(install_directory: Path, use_cached_bundles: bool, bundles_folder: str) -> None:
    """
    Remove output left over from a previous build.

    When cached bundles are reused only the bundle folder survives,
    otherwise the whole directory is removed.
    """
    install_directory = Path(install_directory)
    if not install_directory.exists():
        return

    if not use_cached_bundles:
        shutil.rmtree(install_directory)
        return

    for entry in install_directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            if entry.name == bundles_folder:
                continue
            shutil.rmtree(entry)
        else:
            entry.unlink()


def copy_file(source: Path, destination: Path) -> Path:
    """Copy a file, creating parent folders and overwriting any existing destination."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    return destination


def include_asset_directly(asset: Path, mod_directory: Path, install_directory: Path, manifest: List[Path]) -> Path:
    """Copy an asset to the same relative path in the install directory and record it."""
    destination = Path(install_directory) / relative_asset_path(asset, mod_directory)
    copy_file(Path(asset), destination)
    manifest.append(destination)
    return destination


def copy_routed_files(routed: List[RoutedFile], install_directory: Path, manifest: List[Path]) -> List[Path]:
    """Copy routed files to their destinations and record them."""
    copied = []
    for routed_file in routed:
        destination = copy_file(routed_file.source, Path(install_directory) / routed_file.destination)
        manifest.append(destination)
        copied.append(destination)
    return copied


def bundle_name_for(mod_name: str, target: BuildTarget, extension: str = ".assetbundle") -> str:
    return f"{mod_name}_{target.name}{extension}"


def build_bundles(
    bundler: AssetBundler,
    mod_name: str,
    targets: List[BuildTarget],
    assets: List[Path],
    bundle_directory: Path,
    manifest: List[Path],
    log_file_name: str = "buildlogtep.json",
    bundle_extension: str = ".assetbundle",
) -> bool:
    """
    Build one bundle per target through the bundler.

    Returns:
        True on success, False as soon as any target fails
    """
    if not assets:
        logger.info("No assets to bundle")
        return True

    produced = []
    for target in targets:
        bundle_name = bundle_name_for(mod_name, target, bundle_extension)
        logger.info(f"Building bundle {bundle_name} with {len(assets)} assets")

        result = bundler.build_bundles(target, Path(bundle_directory), bundle_name, list(assets))
        if not result.success:
            logger.error(f"Mod assetbundle build failed: {result.message}")
            return False

        # The bundler's build log is not part of the mod
        (Path(bundle_directory) / log_file_name).unlink(missing_ok=True)

        produced.extend(Path(path) for path in result.files)

    # Same order as collect_cached_bundles
    manifest.extend(sorted(produced))
    return True


def collect_cached_bundles(bundle_directory: Path, manifest: List[Path]) -> List[Path]:
    """Record bundles already present from the previous build."""
    bundles = sorted(path for path in Path(bundle_directory).iterdir() if path.is_file())
    manifest.extend(bundles)
    return bundles
