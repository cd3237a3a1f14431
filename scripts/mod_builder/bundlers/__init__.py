"""
Bundle builders for the pipeline.
Bundle encoding is delegated to these collaborators; the pipeline only orchestrates them.
"""

from .base import (
    AssetBundler, BuildTarget, BundleResult, BundlerError, BundlerRegistry,
    BUILD_TARGETS, select_targets, bundler_registry
)
from .archive import ArchiveBundler
from .command import CommandBundler

# Register bundler classes with the global registry
bundler_registry.register_bundler_class("archive", ArchiveBundler)
bundler_registry.register_bundler_class("command", CommandBundler)

__all__ = [
    # Base classes and registry
    "AssetBundler",
    "BuildTarget",
    "BundleResult",
    "BundlerRegistry",
    "bundler_registry",
    "BUILD_TARGETS",
    "select_targets",

    # Exceptions
    "BundlerError",

    # Concrete bundlers
    "ArchiveBundler",
    "CommandBundler",
]
