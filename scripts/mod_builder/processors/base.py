"""
Preprocessor extension point.

Third-party code extends a build by registering a BuildProcessor. Every
registered processor runs before classification and may add, remove or
rewrite files both on disk and in the shared asset list.
"""

import logging
from abc import ABC, abstractmethod
from importlib import metadata
from pathlib import Path
from typing import Dict, List, Type

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "mod_builder.processors"


class ProcessorLoadError(Exception):
    """Raised when a processor cannot be loaded or instantiated."""

    def __init__(self, message: str, processor: str):
        super().__init__(message)
        self.processor = processor


class BuildProcessor(ABC):
    """Abstract base class for build preprocessors."""

    @abstractmethod
    def execute(self, settings, install_directory: Path, asset_paths: List[Path]) -> None:
        """
        Run the preprocessing step.

        Args:
            settings: ModBuilderSettings of the build
            install_directory: Output directory of the build
            asset_paths: Shared asset list; mutate it in place
        """
        pass


class ProcessorRegistry:
    """Explicit registry of build processors."""

    def __init__(self):
        self._processor_classes: Dict[str, Type[BuildProcessor]] = {}
        self._processors: Dict[str, BuildProcessor] = {}

    def register_processor_class(self, name: str, processor_class: Type[BuildProcessor]) -> None:
        """Register a processor class, instantiated at the start of every build."""
        self._processor_classes[name] = processor_class

    def register_processor(self, name: str, processor: BuildProcessor) -> None:
        """Register a ready processor instance."""
        if not isinstance(processor, BuildProcessor):
            raise TypeError(f"{type(processor).__name__} is not a BuildProcessor")
        self._processors[name] = processor

    def remove_processor(self, name: str) -> None:
        self._processor_classes.pop(name, None)
        self._processors.pop(name, None)

    def clear_processors(self) -> None:
        self._processor_classes.clear()
        self._processors.clear()

    def list_registered_processors(self) -> List[str]:
        return sorted(set(self._processor_classes) | set(self._processors))

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """
        Register processor classes advertised by installed distributions.

        Entry points that fail to load are logged and skipped.

        Returns:
            Number of processor classes registered
        """
        loaded = 0
        for entry_point in metadata.entry_points(group=group):
            try:
                processor_class = entry_point.load()
            except Exception as e:
                logger.warning(f"Skipping processor entry point {entry_point.name}: {e}")
                continue
            self.register_processor_class(entry_point.name, processor_class)
            loaded += 1
        return loaded

    def _instantiate(self, name: str, processor_class: Type[BuildProcessor]) -> BuildProcessor:
        if not (isinstance(processor_class, type) and issubclass(processor_class, BuildProcessor)):
            raise ProcessorLoadError(f"{processor_class!r} is not a BuildProcessor subclass", name)
        try:
            return processor_class()
        except Exception as e:
            raise ProcessorLoadError(f"Failed to instantiate {processor_class.__name__}: {e}", name) from e

    def create_processors(self) -> List[BuildProcessor]:
        """
        Instantiate every registered processor.

        A processor that fails to load is logged and skipped so a broken
        third-party processor cannot block the build.
        """
        processors = list(self._processors.values())

        for name, processor_class in self._processor_classes.items():
            try:
                processors.append(self._instantiate(name, processor_class))
            except ProcessorLoadError as e:
                logger.warning(f"Skipping processor '{e.processor}': {e}")

        return processors


def run_preprocessors(settings, install_directory: Path, asset_paths: List[Path],
                      registry: ProcessorRegistry) -> int:
    """
    Run all registered processors over the shared asset list.

    Errors raised by a processor's ``execute`` propagate to the caller.

    Returns:
        Number of processors executed
    """
    processors = registry.create_processors()
    for processor in processors:
        logger.info(f"Running processor {type(processor).__name__}")
        processor.execute(settings, install_directory, asset_paths)
    return len(processors)


# Global processor registry instance
processor_registry = ProcessorRegistry()
