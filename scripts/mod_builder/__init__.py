"""
Mod Builder

Packages a mod source tree (configuration, localization tables, scripts,
native libraries and raw assets) into a distributable output directory with
a manifest listing every produced file. Asset bundles are rebuilt only when
their inputs changed since the last successful build.
"""

__version__ = "0.1.0"
__author__ = "Mod SDK Team"

from .config import BuilderConfig, ModBuilderSettings, ModMetadata, ModFile, ModAsset
from .pipeline import ModBuilder, BuildError
from .bundlers.base import AssetBundler, BuildTarget, BundleResult
from .processors.base import BuildProcessor, ProcessorRegistry

__all__ = [
    "BuilderConfig",
    "ModBuilderSettings",
    "ModBuilder",
    "BuildError",
    "ModMetadata",
    "ModFile",
    "ModAsset",
    "AssetBundler",
    "BuildTarget",
    "BundleResult",
    "BuildProcessor",
    "ProcessorRegistry",
]
