"""
Command-line interface for the mod builder.
Provides commands for building mods and inspecting build state.
"""

import os
import sys
import importlib
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import BuilderConfig, ModBuilderSettings, SettingsError
from .pipeline import ModBuilder, BuildState
from .processors import processor_registry
from .processing.reference import ReferenceFileGenerator

# Initialize typer app and rich console
app = typer.Typer(
    name="mod-builder",
    help="Mod builder - package mod sources into a distributable, versioned output directory",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]mod-builder build Mods/MyMod/ModBuilderSettings.json out/[/cyan]   Build a mod into out/MyMod
  [cyan]mod-builder check Mods/MyMod/ModBuilderSettings.json out/[/cyan]   Check whether bundles must be rebuilt
  [cyan]mod-builder reference ref.txt --enum game.items:ItemId[/cyan]        Write an identifier reference

[bold]Environment Variables:[/bold]
  Use [cyan]mod-builder config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()


@app.command()
def build(
    settings_file: Path = typer.Argument(..., help="Mod settings JSON file"),
    export_path: Path = typer.Argument(..., help="Export directory"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    subdir: bool = typer.Option(True, "--subdir/--no-subdir", help="Install into <export>/<mod name> and clean it first"),
    cache_bundles: Optional[bool] = typer.Option(None, "--cache/--no-cache", help="Override bundle caching"),
    linux: Optional[bool] = typer.Option(None, "--linux/--no-linux", help="Override building Linux bundles"),
    force_reimport: bool = typer.Option(False, "--force-reimport", help="Ask the asset index to reimport scripts"),
    load_entry_points: bool = typer.Option(True, "--entry-points/--no-entry-points", help="Load installed processors"),
):
    """Build a mod and save the updated hash ledger."""
    config = _load_config(config_file)
    settings = _load_settings(settings_file)

    if cache_bundles is not None:
        settings.cache_bundles = cache_bundles
    if linux is not None:
        settings.build_linux = linux
    if force_reimport:
        settings.force_reimport = True

    if load_entry_points:
        processor_registry.load_entry_points()

    console.print(f"[bold blue]Building mod {settings.metadata.name}...[/bold blue]")

    builder = ModBuilder(config)
    success = builder.build(settings, export_path, install_in_sub_directory=subdir)

    _display_build_summary(builder.state)

    if not success:
        console.print("[red]✗ Build failed[/red]")
        raise typer.Exit(1)

    settings.save()
    console.print(f"[green]✓[/green] Built mod at {builder.state.install_directory}")
    console.print(f"[green]✓[/green] Updated hash ledger in {settings.source_file}")


@app.command()
def check(
    settings_file: Path = typer.Argument(..., help="Mod settings JSON file"),
    export_path: Path = typer.Argument(..., help="Export directory"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    subdir: bool = typer.Option(True, "--subdir/--no-subdir", help="Mod is installed into <export>/<mod name>"),
):
    """Check whether cached bundles can be reused."""
    config = _load_config(config_file)
    settings = _load_settings(settings_file)

    try:
        stale = ModBuilder(config).bundles_stale(settings, export_path, install_in_sub_directory=subdir)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if stale:
        console.print("[yellow]Bundles are stale and will be rebuilt[/yellow]")
    else:
        console.print("[green]✓ Bundles are up to date and can be reused[/green]")


@app.command()
def reference(
    output: Path = typer.Argument(..., help="Reference file to write"),
    enum_path: Optional[str] = typer.Option(None, "--enum", "-e", help="Enumeration as module:Name"),
    names: Optional[str] = typer.Option(None, "--names", help="Comma-separated identifiers"),
    title: Optional[str] = typer.Option(None, "--title", help="Heading of the reference file"),
):
    """Write a reference listing of every identifier of an enumeration."""
    if bool(enum_path) == bool(names):
        console.print("[red]Pass exactly one of --enum or --names[/red]")
        raise typer.Exit(1)

    if enum_path:
        try:
            identifiers = _import_object(enum_path)
        except (ImportError, AttributeError, ValueError) as e:
            console.print(f"[red]Cannot load {enum_path}:[/red] {e}")
            raise typer.Exit(1)
    else:
        identifiers = [name.strip() for name in names.split(",") if name.strip()]

    path = ReferenceFileGenerator().write(identifiers, output, title)
    console.print(f"[green]✓[/green] Wrote reference file {path}")


@app.command()
def processors(
    load_entry_points: bool = typer.Option(True, "--entry-points/--no-entry-points", help="Load installed processors"),
):
    """List registered build processors."""
    if load_entry_points:
        processor_registry.load_entry_points()

    names = processor_registry.list_registered_processors()
    if not names:
        console.print("[dim]No build processors registered[/dim]")
        return

    table = Table(title="Build Processors")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


@app.command()
def config(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate: bool = typer.Option(False, "--validate", help="Validate configuration"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables"),
):
    """Manage builder configuration."""
    if env_vars:
        _display_env_vars()
        return

    builder_config = _load_config(config_file)

    if show:
        _display_config(builder_config)

    if validate:
        errors = builder_config.validate()
        if errors:
            console.print("[red]Configuration errors:[/red]")
            for error in errors:
                console.print(f"  [red]✗[/red] {error}")
            raise typer.Exit(1)
        console.print("[green]✓ Configuration is valid[/green]")

    if not show and not validate:
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")


@app.command()
def version():
    """Show mod builder version information."""
    console.print("[bold]Mod Builder[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])


def _load_config(config_file: Optional[Path]) -> BuilderConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        config = BuilderConfig.from_file(config_file)
        console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        for config_path in [Path("mod_builder.toml"), Path("mod_builder.json")]:
            if config_path.exists():
                console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = BuilderConfig.from_file(config_path)
                break

        if config is None:
            console.print("[dim]Using default configuration[/dim]")
            config = BuilderConfig()

    config = BuilderConfig._apply_env_overrides(config)

    env_vars_used = [key for key in os.environ if key.startswith('MOD_BUILDER_')]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _load_settings(settings_file: Path) -> ModBuilderSettings:
    try:
        return ModBuilderSettings.from_file(settings_file)
    except (FileNotFoundError, SettingsError) as e:
        console.print(f"[red]Error loading settings:[/red] {e}")
        raise typer.Exit(1)


def _import_object(path: str):
    module_name, _, attribute = path.partition(":")
    if not attribute:
        raise ValueError("expected module:Name")
    obj = importlib.import_module(module_name)
    for part in attribute.split("."):
        obj = getattr(obj, part)
    return obj


def _display_build_summary(state: BuildState) -> None:
    """Display build step summary."""
    if not state.step_results:
        return

    table = Table(title="Build Steps")
    table.add_column("Step", style="cyan")
    table.add_column("Status", width=8)
    table.add_column("Duration", style="yellow")
    table.add_column("Details", style="dim")

    for step, result in state.step_results.items():
        status = "[green]✓[/green]" if result.success else "[red]✗[/red]"
        details = ", ".join(f"{key}={value}" for key, value in result.data.items())
        table.add_row(step.value, status, f"{result.duration:.2f}s", details)

    console.print(table)


def _display_config(config: BuilderConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Mod Builder Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Conf Folder", f"{config.conf_folder} {config.conf_extensions}")
    table.add_row("Localization Folder", f"{config.localization_folder} {config.localization_extensions}")
    table.add_row("Script Extensions", str(config.script_extensions))
    table.add_row("Library Extensions", str(config.library_extensions))
    table.add_row("Excluded Folders", str(config.excluded_folders))

    table.add_row("Scripts Folder", config.scripts_folder)
    table.add_row("Generated Folder", config.generated_folder)
    table.add_row("Libraries Folder", config.libraries_folder)
    table.add_row("Bundles Folder", config.bundles_folder)
    table.add_row("Manifest File", config.manifest_file)

    table.add_row("Ledger Excluded Extensions", str(config.ledger_excluded_extensions))
    table.add_row("Metadata Files", str(config.metadata_file_names))

    table.add_row("Project Directory", config.project_dir)
    table.add_row("Generated Code Dirs", str(config.generated_code_dirs))

    table.add_row("Bundler", config.bundler)
    table.add_row("Bundler Command", " ".join(config.bundler_command) or "-")
    table.add_row("Log Level", config.log_level)

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables for configuration."""
    table = Table(title="Mod Builder Environment Variables")
    table.add_column("Environment Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")

    env_vars = [
        ("MOD_BUILDER_PROJECT_DIR", "Project root for generated code lookup", "."),
        ("MOD_BUILDER_GENERATED_CODE_DIRS", "Comma-separated generated code folders", "Temp/GeneratedCode"),
        ("MOD_BUILDER_EXCLUDED_FOLDERS", "Comma-separated folders never packaged", "Editor,CodeGen"),
        ("MOD_BUILDER_BUNDLER", "Bundler to use (archive, command)", "archive"),
        ("MOD_BUILDER_BUNDLER_COMMAND", "External bundler command line", "bundle-tool {target} {asset_list}"),
        ("MOD_BUILDER_MANIFEST_FILE", "Manifest file name", "ModManifest.json"),
        ("MOD_BUILDER_LOG_LEVEL", "Logging level", "INFO"),
    ]

    for var_name, description, example in env_vars:
        table.add_row(var_name, description, example)

    console.print(table)
    console.print("\n[dim]Set these environment variables to override configuration file settings.[/dim]")


if __name__ == "__main__":
    app()
