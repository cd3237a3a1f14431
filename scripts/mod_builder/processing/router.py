"""
Asset classification.

Each routing stage takes the shared asset list, removes the assets it claims
and returns where they go. Stages must run in the order config, localization,
scripts, libraries, bundles so no asset is claimed twice.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from ..config import BuilderConfig
from .discovery import has_extension, is_in_excluded_folder, is_under, relative_asset_path

logger = logging.getLogger(__name__)


@dataclass
class RoutedFile:
    """A source file and its destination relative to the install directory."""
    source: Path
    destination: str


def _take(asset_paths: List[Path], predicate: Callable[[Path], bool]) -> List[Path]:
    """Remove and return every asset matching ``predicate``, keeping list identity."""
    taken = [asset for asset in asset_paths if predicate(asset)]
    if taken:
        claimed = set(taken)
        asset_paths[:] = [asset for asset in asset_paths if asset not in claimed]
    return taken


class AssetRouter:
    """Splits discovered assets into config, localization, script, library and bundle sets."""

    def __init__(self, config: BuilderConfig, mod_directory: Path):
        self.config = config
        self.mod_directory = Path(mod_directory).resolve()

    def is_excluded(self, asset: Path) -> bool:
        """True for assets under an Editor/CodeGen folder."""
        return is_in_excluded_folder(asset, self.mod_directory, self.config.excluded_folders)

    def _route_in_folder(self, asset_paths: List[Path], folder: str, extensions: List[str]) -> List[RoutedFile]:
        folder_path = self.mod_directory / folder

        taken = _take(
            asset_paths,
            lambda asset: has_extension(asset, extensions) and is_under(asset, folder_path),
        )
        return [RoutedFile(asset, relative_asset_path(asset, self.mod_directory)) for asset in taken]

    def route_config(self, asset_paths: List[Path]) -> List[RoutedFile]:
        """Claim configuration files under the ``Conf`` folder."""
        return self._route_in_folder(asset_paths, self.config.conf_folder, self.config.conf_extensions)

    def route_localization(self, asset_paths: List[Path]) -> List[RoutedFile]:
        """Claim localization tables under the ``Localization`` folder."""
        return self._route_in_folder(
            asset_paths, self.config.localization_folder, self.config.localization_extensions
        )

    def route_scripts(self, asset_paths: List[Path], mod_name: str) -> List[RoutedFile]:
        """
        Claim script sources and pick up generated code for the mod.

        Scripts keep their path relative to the mod root under the scripts
        folder; scripts outside the mod root are placed directly in it.
        Generated files found under ``<generated dir>/<mod name>`` are
        not part of the asset list; they are appended and flattened into
        ``Scripts/Generated``.
        """
        taken = _take(
            asset_paths,
            lambda asset: has_extension(asset, self.config.script_extensions) and not self.is_excluded(asset),
        )

        routed = [RoutedFile(asset, self._script_destination(asset)) for asset in taken]

        for generated_file in self.find_generated_code(mod_name):
            logger.info(f"Adding generated file {generated_file}")
            routed.append(RoutedFile(
                generated_file,
                f"{self.config.scripts_folder}/{self.config.generated_folder}/{generated_file.name}",
            ))

        return routed

    def _script_destination(self, asset: Path) -> str:
        # Scripts added from outside the mod root are flattened
        if is_under(asset, self.mod_directory):
            return f"{self.config.scripts_folder}/{relative_asset_path(asset, self.mod_directory)}"
        return f"{self.config.scripts_folder}/{Path(asset).name}"

    def find_generated_code(self, mod_name: str) -> List[Path]:
        """List files written by code generation for this mod."""
        project_dir = Path(self.config.project_dir)
        generated = []

        for code_dir in self.config.generated_code_dirs:
            mod_code_dir = project_dir / code_dir / mod_name
            if mod_code_dir.is_dir():
                generated.extend(sorted(p.resolve() for p in mod_code_dir.rglob("*") if p.is_file()))

        return generated

    def route_libraries(self, asset_paths: List[Path]) -> List[RoutedFile]:
        """Claim native libraries, flattened into the libraries folder."""
        taken = _take(
            asset_paths,
            lambda asset: has_extension(asset, self.config.library_extensions) and not self.is_excluded(asset),
        )
        return [RoutedFile(asset, f"{self.config.libraries_folder}/{asset.name}") for asset in taken]

    def route_bundle_assets(self, asset_paths: List[Path]) -> List[Path]:
        """Claim everything left outside Editor/CodeGen folders for bundling."""
        return _take(asset_paths, lambda asset: not self.is_excluded(asset))
