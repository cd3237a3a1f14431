"""
Asset discovery for mod source trees.
"""

from pathlib import Path
from typing import Iterable, List, Union


def discover_assets(mod_directory: Union[str, Path]) -> List[Path]:
    """
    Enumerate every file under a mod source root.

    Args:
        mod_directory: Root of the mod sources

    Returns:
        Absolute file paths in sorted order. Directories are never included.

    Raises:
        FileNotFoundError: If the root does not exist
    """
    root = Path(mod_directory).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Mod directory not found: {root}")

    return sorted(path for path in root.rglob("*") if path.is_file())


def is_in_excluded_folder(asset: Path, mod_directory: Path, excluded_names: Iterable[str]) -> bool:
    """
    Check whether any folder between the mod root and the asset is excluded.

    The mod root itself is never considered, so a mod living under an
    ``Editor`` folder still builds.
    """
    excluded = set(excluded_names)
    root = Path(mod_directory).resolve()
    parent = Path(asset).resolve().parent

    while parent != root and parent != parent.parent:
        if parent.name in excluded:
            return True
        parent = parent.parent

    return False


def relative_asset_path(asset: Path, root: Path) -> str:
    """Path of ``asset`` relative to ``root`` using forward slashes."""
    return Path(asset).resolve().relative_to(Path(root).resolve()).as_posix()


def is_under(asset: Path, folder: Path) -> bool:
    """True if ``asset`` lives somewhere below ``folder``."""
    try:
        Path(asset).resolve().relative_to(Path(folder).resolve())
    except ValueError:
        return False
    return True


def has_extension(asset: Path, extensions: Iterable[str]) -> bool:
    return Path(asset).suffix.lower() in {ext.lower() for ext in extensions}
