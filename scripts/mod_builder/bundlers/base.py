"""
Abstract base classes for asset bundlers.
Defines the interface the build pipeline uses to delegate bundle encoding.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type


@dataclass(frozen=True)
class BuildTarget:
    """A platform bundles are built for."""
    name: str
    build_target: str
    build_target_group: str = "Standalone"


BUILD_TARGETS = [
    BuildTarget(name="Windows", build_target="StandaloneWindows64"),
    BuildTarget(name="Linux", build_target="StandaloneLinux64"),
]


def select_targets(settings) -> List[BuildTarget]:
    """Windows is always built; Linux only when the settings ask for it."""
    return [target for target in BUILD_TARGETS if target.name == "Windows" or settings.build_linux]


@dataclass
class BundleResult:
    """Outcome of one bundler invocation."""
    success: bool
    files: List[Path] = field(default_factory=list)
    message: str = ""


class BundlerError(Exception):
    """Base exception for bundler errors."""

    def __init__(self, message: str, bundler: str):
        super().__init__(message)
        self.bundler = bundler


class AssetBundler(ABC):
    """Abstract base class for bundle builders."""

    name = "bundler"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @abstractmethod
    def build_bundles(
        self,
        target: BuildTarget,
        output_dir: Path,
        bundle_name: str,
        assets: List[Path],
    ) -> BundleResult:
        """
        Build a bundle containing ``assets`` for ``target``.

        Args:
            target: Platform to build for
            output_dir: Folder the bundle files are written to
            bundle_name: File name of the main bundle
            assets: Absolute paths of the assets to include

        Returns:
            BundleResult with the absolute paths of every produced bundle file
        """
        pass

    def get_bundler_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "class": self.__class__.__name__,
            "config": self.config,
        }


class BundlerRegistry:
    """Registry of bundler classes by name."""

    def __init__(self):
        self._bundler_classes: Dict[str, Type[AssetBundler]] = {}

    def register_bundler_class(self, name: str, bundler_class: Type[AssetBundler]) -> None:
        if not issubclass(bundler_class, AssetBundler):
            raise TypeError(f"{bundler_class.__name__} is not an AssetBundler")
        self._bundler_classes[name] = bundler_class

    def create_bundler(self, name: str, config: Optional[Dict[str, Any]] = None) -> AssetBundler:
        """
        Instantiate a registered bundler.

        Raises:
            ValueError: If no bundler is registered under ``name``
        """
        if name not in self._bundler_classes:
            raise ValueError(
                f"Bundler '{name}' not registered. Available: {list(self._bundler_classes.keys())}"
            )
        return self._bundler_classes[name](config)

    def list_bundler_classes(self) -> List[str]:
        return list(self._bundler_classes.keys())


# Global bundler registry instance
bundler_registry = BundlerRegistry()
