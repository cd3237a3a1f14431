"""
Mod manifest generation.
"""

import json
from pathlib import Path
from typing import List

from ..config import ModFile, ModMetadata


class ManifestError(Exception):
    """Raised when a produced file cannot be expressed relative to the install directory."""
    pass


def build_manifest_files(manifest: List[Path], install_directory: Path) -> List[ModFile]:
    """
    Convert absolute output paths into manifest entries.

    Args:
        manifest: Absolute paths of every produced file
        install_directory: Root the entries are made relative to

    Returns:
        Entries with forward-slash paths relative to the install directory
    """
    root = Path(install_directory).resolve()
    files = []

    for output_file in manifest:
        try:
            relative = Path(output_file).resolve().relative_to(root)
        except ValueError:
            raise ManifestError(f"Output file {output_file} is outside {root}")
        files.append(ModFile(path=relative.as_posix()))

    return files


def write_mod_manifest(
    metadata: ModMetadata,
    manifest: List[Path],
    install_directory: Path,
    file_name: str = "ModManifest.json",
) -> Path:
    """
    Repopulate the metadata file list and write it to the install directory.

    The metadata object is updated in place so the caller sees the same
    file list that was written to disk.
    """
    metadata.files.clear()
    metadata.files.extend(build_manifest_files(manifest, install_directory))

    manifest_path = Path(install_directory) / file_name
    with open(manifest_path, 'w', encoding='utf-8') as f:
        json.dump(metadata.to_dict(), f, indent=4)

    return manifest_path


def load_mod_manifest(manifest_path: Path) -> ModMetadata:
    """Read a manifest written by :func:`write_mod_manifest`."""
    with open(manifest_path, 'r', encoding='utf-8') as f:
        return ModMetadata.from_dict(json.load(f))
