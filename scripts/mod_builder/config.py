"""
Configuration management for the mod builder.
Supports TOML and JSON configuration files with validation, plus the
per-mod build settings that carry the hash ledger between builds.
"""

import os
import json
import uuid
from dataclasses import dataclass, field, asdict

# Handle tomllib import for different Python versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python < 3.11 with tomli package
    except ImportError:
        tomllib = None  # Fallback if no TOML support
from typing import Dict, List, Optional, Any, Union
from pathlib import Path


SETTINGS_FILE_NAME = "ModBuilderSettings.json"


class ConfigurationError(Exception):
    """Raised when a builder configuration file cannot be used."""
    pass


class SettingsError(Exception):
    """Raised when a mod settings file is missing fields or malformed."""
    pass


@dataclass
class BuilderConfig:
    """Main configuration class for the mod builder."""

    # Routing rules
    conf_folder: str = "Conf"
    conf_extensions: List[str] = field(default_factory=lambda: [".json"])
    localization_folder: str = "Localization"
    localization_extensions: List[str] = field(default_factory=lambda: [".csv"])
    script_extensions: List[str] = field(default_factory=lambda: [".cs"])
    library_extensions: List[str] = field(default_factory=lambda: [".dll"])
    excluded_folders: List[str] = field(default_factory=lambda: ["Editor", "CodeGen"])

    # Output layout
    scripts_folder: str = "Scripts"
    generated_folder: str = "Generated"
    libraries_folder: str = "Libraries"
    bundles_folder: str = "Bundles"
    manifest_file: str = "ModManifest.json"
    bundle_extension: str = ".assetbundle"
    bundle_log_file: str = "buildlogtep.json"

    # Cache settings
    ledger_excluded_extensions: List[str] = field(default_factory=lambda: [".cs", ".dll", ".asmdef"])
    metadata_file_names: List[str] = field(default_factory=lambda: [SETTINGS_FILE_NAME, "ModSettings.json"])

    # Generated code
    project_dir: str = "."
    generated_code_dirs: List[str] = field(
        default_factory=lambda: ["Temp/GeneratedCode", "Temp/NetCodeGenerated"]
    )

    # Bundler
    bundler: str = "archive"
    bundler_command: List[str] = field(default_factory=list)

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "BuilderConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ConfigurationError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "BuilderConfig":
        """Load configuration from TOML file."""
        if tomllib is None:
            raise ImportError("TOML support not available. Install tomli package for Python < 3.11")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "BuilderConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "BuilderConfig":
        """Create configuration from dictionary."""
        config_data = {}
        defaults = cls()

        if 'routing' in data:
            routing = data['routing']
            config_data['conf_folder'] = routing.get('conf_folder', defaults.conf_folder)
            config_data['conf_extensions'] = routing.get('conf_extensions', defaults.conf_extensions)
            config_data['localization_folder'] = routing.get('localization_folder', defaults.localization_folder)
            config_data['localization_extensions'] = routing.get(
                'localization_extensions', defaults.localization_extensions
            )
            config_data['script_extensions'] = routing.get('script_extensions', defaults.script_extensions)
            config_data['library_extensions'] = routing.get('library_extensions', defaults.library_extensions)
            config_data['excluded_folders'] = routing.get('excluded_folders', defaults.excluded_folders)

        if 'output' in data:
            output = data['output']
            config_data['scripts_folder'] = output.get('scripts_folder', defaults.scripts_folder)
            config_data['generated_folder'] = output.get('generated_folder', defaults.generated_folder)
            config_data['libraries_folder'] = output.get('libraries_folder', defaults.libraries_folder)
            config_data['bundles_folder'] = output.get('bundles_folder', defaults.bundles_folder)
            config_data['manifest_file'] = output.get('manifest_file', defaults.manifest_file)
            config_data['bundle_extension'] = output.get('bundle_extension', defaults.bundle_extension)
            config_data['bundle_log_file'] = output.get('bundle_log_file', defaults.bundle_log_file)

        if 'cache' in data:
            cache = data['cache']
            config_data['ledger_excluded_extensions'] = cache.get(
                'ledger_excluded_extensions', defaults.ledger_excluded_extensions
            )
            config_data['metadata_file_names'] = cache.get('metadata_file_names', defaults.metadata_file_names)

        if 'generated' in data:
            generated = data['generated']
            config_data['project_dir'] = generated.get('project_dir', defaults.project_dir)
            config_data['generated_code_dirs'] = generated.get('code_dirs', defaults.generated_code_dirs)

        if 'bundler' in data:
            bundler = data['bundler']
            config_data['bundler'] = bundler.get('name', defaults.bundler)
            config_data['bundler_command'] = bundler.get('command', defaults.bundler_command)

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', defaults.log_level)

        return cls(**config_data)

    @classmethod
    def default(cls) -> "BuilderConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def _apply_env_overrides(cls, config: "BuilderConfig") -> "BuilderConfig":
        """Apply environment variable overrides to configuration."""

        if os.getenv('MOD_BUILDER_PROJECT_DIR'):
            config.project_dir = os.getenv('MOD_BUILDER_PROJECT_DIR', '.')

        if os.getenv('MOD_BUILDER_GENERATED_CODE_DIRS'):
            config.generated_code_dirs = os.getenv('MOD_BUILDER_GENERATED_CODE_DIRS', '').split(',')

        if os.getenv('MOD_BUILDER_EXCLUDED_FOLDERS'):
            config.excluded_folders = os.getenv('MOD_BUILDER_EXCLUDED_FOLDERS', '').split(',')

        if os.getenv('MOD_BUILDER_BUNDLER'):
            config.bundler = os.getenv('MOD_BUILDER_BUNDLER', 'archive')

        if os.getenv('MOD_BUILDER_BUNDLER_COMMAND'):
            config.bundler_command = os.getenv('MOD_BUILDER_BUNDLER_COMMAND', '').split()

        if os.getenv('MOD_BUILDER_MANIFEST_FILE'):
            config.manifest_file = os.getenv('MOD_BUILDER_MANIFEST_FILE', 'ModManifest.json')

        if os.getenv('MOD_BUILDER_LOG_LEVEL'):
            config.log_level = os.getenv('MOD_BUILDER_LOG_LEVEL', 'INFO').upper()

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        for name in ('conf_extensions', 'localization_extensions', 'script_extensions',
                     'library_extensions', 'ledger_excluded_extensions'):
            for extension in getattr(self, name):
                if not extension.startswith('.'):
                    errors.append(f"{name} entries must start with '.', got {extension!r}")

        folders = [self.scripts_folder, self.libraries_folder, self.bundles_folder]
        if len(set(folders)) != len(folders):
            errors.append("scripts_folder, libraries_folder and bundles_folder must be distinct")

        if not self.manifest_file:
            errors.append("manifest_file must not be empty")

        if self.bundler == "command" and not self.bundler_command:
            errors.append("bundler_command is required when bundler is 'command'")

        if self.log_level.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            errors.append("log_level must be DEBUG, INFO, WARNING, or ERROR")

        return errors


@dataclass
class ModFile:
    """A produced file, relative to the install directory."""
    path: str


@dataclass
class ModAsset:
    """Hash ledger entry for one source asset."""
    path: str
    hash: str


@dataclass
class ModMetadata:
    """Identity of a mod plus the file list written into its manifest."""
    guid: str = field(default_factory=lambda: uuid.uuid4().hex)
    name: str = "MyMod"
    files: List[ModFile] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guid": self.guid,
            "name": self.name,
            "files": [{"path": f.path} for f in self.files],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModMetadata":
        return cls(
            guid=data.get('guid') or uuid.uuid4().hex,
            name=data.get('name', 'MyMod'),
            files=[ModFile(path=f['path']) for f in data.get('files', [])],
        )


@dataclass
class ModBuilderSettings:
    """
    Caller-owned settings for building one mod.

    The builder reads the flags, rewrites ``assets`` (the hash ledger) and
    ``last_build_linux`` after a successful build, and repopulates
    ``metadata.files``. Persisting the object is up to the caller.
    """
    mod_path: str = "Assets/Mod"
    metadata: ModMetadata = field(default_factory=ModMetadata)
    build_bundles: bool = True
    cache_bundles: bool = False
    build_linux: bool = False
    last_build_linux: bool = False
    force_reimport: bool = False
    assets: List[ModAsset] = field(default_factory=list)
    source_file: Optional[Path] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_file(cls, settings_path: Union[str, Path]) -> "ModBuilderSettings":
        """Load settings from a JSON file."""
        settings_path = Path(settings_path)

        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {settings_path}")

        try:
            with open(settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid settings file {settings_path}: {e}")

        settings = cls.from_dict(data)
        settings.source_file = settings_path.resolve()

        return settings

    @property
    def mod_directory(self) -> Path:
        """Absolute mod source root. Relative paths resolve against the settings file."""
        path = Path(self.mod_path)
        if not path.is_absolute() and self.source_file is not None:
            path = self.source_file.parent / path
        return path.resolve()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModBuilderSettings":
        if 'metadata' not in data:
            raise SettingsError("Settings are missing the 'metadata' section")

        try:
            assets = [ModAsset(path=a['path'], hash=a.get('hash', '')) for a in data.get('assets', [])]
        except (KeyError, TypeError) as e:
            raise SettingsError(f"Malformed hash ledger entry: {e}")

        return cls(
            mod_path=data.get('mod_path', 'Assets/Mod'),
            metadata=ModMetadata.from_dict(data['metadata']),
            build_bundles=data.get('build_bundles', True),
            cache_bundles=data.get('cache_bundles', False),
            build_linux=data.get('build_linux', False),
            last_build_linux=data.get('last_build_linux', False),
            force_reimport=data.get('force_reimport', False),
            assets=assets,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mod_path": self.mod_path,
            "metadata": self.metadata.to_dict(),
            "build_bundles": self.build_bundles,
            "cache_bundles": self.cache_bundles,
            "build_linux": self.build_linux,
            "last_build_linux": self.last_build_linux,
            "force_reimport": self.force_reimport,
            "assets": [asdict(a) for a in self.assets],
        }

    def save(self, settings_path: Optional[Union[str, Path]] = None) -> Path:
        """Write settings (including the hash ledger) as JSON."""
        target = Path(settings_path) if settings_path else self.source_file
        if target is None:
            raise SettingsError("No path given and settings were not loaded from a file")

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)
            f.write('\n')

        return target
