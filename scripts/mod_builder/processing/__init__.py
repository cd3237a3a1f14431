"""
Build stages: discovery, change detection, routing, packaging, manifest and reference files.
"""

from .discovery import discover_assets, is_in_excluded_folder, relative_asset_path
from .changes import ChangeDetector, hash_file, is_ledger_excluded
from .router import AssetRouter, RoutedFile
from .packager import (
    clean_install_directory,
    include_asset_directly,
    copy_routed_files,
    build_bundles,
    collect_cached_bundles,
)
from .manifest import ManifestError, build_manifest_files, write_mod_manifest, load_mod_manifest
from .reference import ReferenceFileGenerator

__all__ = [
    "discover_assets",
    "is_in_excluded_folder",
    "relative_asset_path",
    "ChangeDetector",
    "hash_file",
    "is_ledger_excluded",
    "AssetRouter",
    "RoutedFile",
    "clean_install_directory",
    "include_asset_directly",
    "copy_routed_files",
    "build_bundles",
    "collect_cached_bundles",
    "ManifestError",
    "build_manifest_files",
    "write_mod_manifest",
    "load_mod_manifest",
    "ReferenceFileGenerator",
]
