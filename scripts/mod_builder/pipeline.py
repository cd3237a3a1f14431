"""
Mod build coordinator.
Runs discovery, change detection, preprocessing, routing, packaging and
manifest generation in a fixed order, with timing, logging and cleanup.
"""

import time
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set
from dataclasses import dataclass, field
from contextlib import contextmanager

from .config import BuilderConfig, ModBuilderSettings
from .bundlers import AssetBundler, bundler_registry, select_targets
from .processors import ProcessorRegistry, processor_registry, run_preprocessors
from .processing.discovery import discover_assets, is_under
from .processing.changes import ChangeDetector
from .processing.router import AssetRouter
from .processing.packager import (
    build_bundles,
    clean_install_directory,
    collect_cached_bundles,
    copy_routed_files,
    include_asset_directly,
)
from .processing.manifest import write_mod_manifest
from .utils.asset_index import AssetIndex, NullAssetIndex, refresh_lock, request_reimport


class BuildStep(Enum):
    """Enumeration of build steps, in execution order."""
    DISCOVER = "discover"
    DETECT_CHANGES = "detect_changes"
    CLEAN = "clean"
    PREPROCESS = "preprocess"
    CONF = "conf"
    LOCALIZATION = "localization"
    SCRIPTS = "scripts"
    LIBRARIES = "libraries"
    BUNDLES = "bundles"
    MANIFEST = "manifest"


@dataclass
class StepResult:
    """Result of a build step execution."""
    step: BuildStep
    success: bool
    duration: float
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BuildState:
    """State of one build pass."""
    current_step: Optional[BuildStep] = None
    completed_steps: List[BuildStep] = field(default_factory=list)
    failed_steps: Set[BuildStep] = field(default_factory=set)
    step_results: Dict[BuildStep, StepResult] = field(default_factory=dict)
    start_time: Optional[float] = None
    install_directory: Optional[Path] = None
    use_cached_bundles: bool = False
    bundler_invoked: bool = False
    original_assets: List[Path] = field(default_factory=list)
    asset_paths: List[Path] = field(default_factory=list)
    preprocessed_assets: Optional[List[Path]] = None
    manifest: List[Path] = field(default_factory=list)
    manifest_path: Optional[Path] = None
    success: bool = False

    @property
    def temporary_files(self) -> List[Path]:
        """
        Files preprocessors added to the asset list.

        Taken from the snapshot made right after preprocessing, or from the
        live asset list if a processor failed before the snapshot was made.
        """
        if self.preprocessed_assets is not None:
            candidates = self.preprocessed_assets
        else:
            candidates = [Path(path).resolve() for path in self.asset_paths]

        original = set(self.original_assets)
        return [path for path in candidates if path not in original]


class BuildError(Exception):
    """Base exception for build errors."""
    def __init__(self, message: str, step: Optional[BuildStep] = None, recoverable: bool = False):
        super().__init__(message)
        self.step = step
        self.recoverable = recoverable


class ModBuilder:
    """
    Builds a mod into an install directory.

    The builder is stateless between builds apart from the caller-owned
    ModBuilderSettings, which carry the hash ledger. One builder must not
    run two builds against the same output at once.
    """

    def __init__(
        self,
        config: Optional[BuilderConfig] = None,
        processors: Optional[ProcessorRegistry] = None,
        bundler: Optional[AssetBundler] = None,
        asset_index: Optional[AssetIndex] = None,
    ):
        """
        Initialize the mod builder.

        Args:
            config: Builder configuration, defaults plus environment overrides if omitted
            processors: Preprocessor registry, the global registry if omitted
            bundler: Bundle builder, created from ``config.bundler`` on first use if omitted
            asset_index: External asset index held locked during builds
        """
        self.config = config or BuilderConfig.default()
        self.processors = processors if processors is not None else processor_registry
        self._bundler = bundler
        self.asset_index = asset_index or NullAssetIndex()
        self.detector = ChangeDetector(self.config)
        self.state = BuildState()
        self.logger = self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the builder."""
        logger = logging.getLogger("mod_builder")
        logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @property
    def bundler(self) -> AssetBundler:
        if self._bundler is None:
            self._bundler = bundler_registry.create_bundler(self.config.bundler, {
                "command": self.config.bundler_command,
                "log_file": self.config.bundle_log_file,
            })
        return self._bundler

    def get_install_directory(self, settings: ModBuilderSettings, export_path: Path,
                              install_in_sub_directory: bool = True) -> Path:
        export_path = Path(export_path)
        if install_in_sub_directory:
            export_path = export_path / settings.metadata.name
        return export_path.resolve()

    def bundles_stale(self, settings: ModBuilderSettings, export_path: Path,
                      install_in_sub_directory: bool = True) -> bool:
        """
        Report whether the next build would have to rebuild bundles.

        Raises:
            FileNotFoundError: If the mod directory does not exist
        """
        install_directory = self.get_install_directory(settings, export_path, install_in_sub_directory)
        asset_paths = discover_assets(settings.mod_directory)
        return self.detector.has_changes(settings, asset_paths) or not self.detector.bundles_present(install_directory)

    def build(
        self,
        settings: ModBuilderSettings,
        export_path: Path,
        install_in_sub_directory: bool = True,
        callback: Optional[Callable[[bool], None]] = None,
    ) -> bool:
        """
        Build the mod described by ``settings`` into ``export_path``.

        Args:
            settings: Mod settings; the ledger and file list are updated on success
            export_path: Export root
            install_in_sub_directory: Install into ``export_path/<mod name>``
                and clean it first
            callback: Called with the result

        Returns:
            True on success. Failures are logged and reported as False, never raised.
        """
        self.state = BuildState(start_time=time.time())

        mod_directory = settings.mod_directory
        if not mod_directory.is_dir():
            self.logger.error(f"No directory at {mod_directory}")
            success = False
        else:
            install_directory = self.get_install_directory(settings, export_path, install_in_sub_directory)
            self.state.install_directory = install_directory
            success = self._build_locked(settings, mod_directory, install_directory, install_in_sub_directory)

        self.state.success = success
        self._generate_execution_summary()

        if callback is not None:
            callback(success)
        return success

    def _build_locked(self, settings: ModBuilderSettings, mod_directory: Path, install_directory: Path,
                      install_in_sub_directory: bool) -> bool:
        with refresh_lock(self.asset_index):
            try:
                self._run_stages(settings, mod_directory, install_directory, install_in_sub_directory)
            except Exception as e:
                self.logger.error(f"Build of {settings.metadata.name} failed: {e}", exc_info=not isinstance(e, BuildError))
                return False
            finally:
                self._remove_temporary_files()

        self.logger.info(f"Successfully built mod at {install_directory}")
        return True

    @contextmanager
    def _step(self, step: BuildStep):
        """Time a build step and record its result."""
        self.state.current_step = step
        self.logger.debug(f"Executing step: {step.value}")
        data: Dict[str, Any] = {}
        start_time = time.time()

        try:
            yield data
        except Exception as e:
            duration = time.time() - start_time
            self.state.step_results[step] = StepResult(
                step=step,
                success=False,
                duration=duration,
                message=f"Step {step.value} failed: {e}",
                data=data,
            )
            self.state.failed_steps.add(step)
            raise

        duration = time.time() - start_time
        self.state.step_results[step] = StepResult(
            step=step,
            success=True,
            duration=duration,
            message=f"Step {step.value} completed successfully",
            data=data,
        )
        self.state.completed_steps.append(step)

    def _run_stages(self, settings: ModBuilderSettings, mod_directory: Path, install_directory: Path,
                    install_in_sub_directory: bool) -> None:
        mod_name = settings.metadata.name
        manifest = self.state.manifest

        with self._step(BuildStep.DISCOVER) as data:
            asset_paths = discover_assets(mod_directory)
            self.state.original_assets = list(asset_paths)
            self.state.asset_paths = asset_paths
            data["assets"] = len(asset_paths)

        with self._step(BuildStep.DETECT_CHANGES) as data:
            use_cached_bundles = (
                settings.cache_bundles
                and settings.build_bundles
                and not self.detector.has_changes(settings, asset_paths)
                and self.detector.bundles_present(install_directory)
            )
            self.state.use_cached_bundles = use_cached_bundles
            data["use_cached_bundles"] = use_cached_bundles

        with self._step(BuildStep.CLEAN):
            if install_in_sub_directory:
                clean_install_directory(install_directory, use_cached_bundles, self.config.bundles_folder)
            install_directory.mkdir(parents=True, exist_ok=True)

        with self._step(BuildStep.PREPROCESS) as data:
            data["processors"] = run_preprocessors(settings, install_directory, asset_paths, self.processors)
            asset_paths[:] = [Path(path).resolve() for path in asset_paths]
            self.state.preprocessed_assets = list(asset_paths)

        router = AssetRouter(self.config, mod_directory)

        with self._step(BuildStep.CONF) as data:
            routed = router.route_config(asset_paths)
            for routed_file in routed:
                include_asset_directly(routed_file.source, mod_directory, install_directory, manifest)
            data["files"] = len(routed)

        with self._step(BuildStep.LOCALIZATION) as data:
            routed = router.route_localization(asset_paths)
            for routed_file in routed:
                include_asset_directly(routed_file.source, mod_directory, install_directory, manifest)
            data["files"] = len(routed)

        with self._step(BuildStep.SCRIPTS) as data:
            routed = router.route_scripts(asset_paths, mod_name)
            if settings.force_reimport:
                request_reimport(
                    self.asset_index,
                    [routed_file.source for routed_file in routed if is_under(routed_file.source, mod_directory)],
                )
            copy_routed_files(routed, install_directory, manifest)
            data["files"] = len(routed)

        with self._step(BuildStep.LIBRARIES) as data:
            routed = router.route_libraries(asset_paths)
            copy_routed_files(routed, install_directory, manifest)
            data["files"] = len(routed)

        if settings.build_bundles:
            with self._step(BuildStep.BUNDLES) as data:
                bundle_directory = install_directory / self.config.bundles_folder

                if use_cached_bundles:
                    data["bundles"] = len(collect_cached_bundles(bundle_directory, manifest))
                else:
                    bundle_assets = router.route_bundle_assets(asset_paths)
                    data["assets"] = len(bundle_assets)
                    if bundle_assets:
                        self.state.bundler_invoked = True
                    if not build_bundles(
                        self.bundler,
                        mod_name,
                        select_targets(settings),
                        bundle_assets,
                        bundle_directory,
                        manifest,
                        self.config.bundle_log_file,
                        self.config.bundle_extension,
                    ):
                        raise BuildError("Bundle build failed", BuildStep.BUNDLES)

        with self._step(BuildStep.MANIFEST) as data:
            ledger = self.detector.compute_ledger(mod_directory, settings.source_file, self.state.temporary_files)
            self.state.manifest_path = write_mod_manifest(
                settings.metadata, manifest, install_directory, self.config.manifest_file
            )
            settings.assets = ledger
            settings.last_build_linux = settings.build_linux
            data["files"] = len(manifest)
            data["ledger_entries"] = len(ledger)

    def _remove_temporary_files(self) -> None:
        """Delete files preprocessors added to the source tree."""
        for path in self.state.temporary_files:
            try:
                path.unlink(missing_ok=True)
                self.logger.debug(f"Removed temporary file {path}")
            except OSError as e:
                self.logger.warning(f"Failed to remove temporary file {path}: {e}")

    def _generate_execution_summary(self) -> None:
        """Log build summary."""
        total_duration = time.time() - (self.state.start_time or time.time())

        self.logger.info("=" * 60)
        self.logger.info("MOD BUILD SUMMARY")
        self.logger.info("=" * 60)
        self.logger.info(f"Result: {'success' if self.state.success else 'failed'}")
        self.logger.info(f"Total execution time: {total_duration:.2f}s")
        self.logger.info(f"Cached bundles reused: {self.state.use_cached_bundles}")
        self.logger.info(f"Files in manifest: {len(self.state.manifest)}")

        if self.state.failed_steps:
            self.logger.info("Failed steps:")
            for step in self.state.failed_steps:
                result = self.state.step_results.get(step)
                if result:
                    self.logger.info(f"  - {step.value}: {result.message}")

        self.logger.info("Step execution times:")
        for step, result in self.state.step_results.items():
            status = "✓" if result.success else "✗"
            self.logger.info(f"  {status} {step.value}: {result.duration:.2f}s")

        self.logger.info("=" * 60)
