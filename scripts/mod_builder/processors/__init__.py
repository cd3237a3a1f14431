"""
Build preprocessors.
Register a BuildProcessor here (or through the ``mod_builder.processors``
entry point group) to run it before every build's classification.
"""

from .base import (
    BuildProcessor, ProcessorRegistry, ProcessorLoadError,
    processor_registry, run_preprocessors, ENTRY_POINT_GROUP
)

__all__ = [
    "BuildProcessor",
    "ProcessorRegistry",
    "ProcessorLoadError",
    "processor_registry",
    "run_preprocessors",
    "ENTRY_POINT_GROUP",
]
