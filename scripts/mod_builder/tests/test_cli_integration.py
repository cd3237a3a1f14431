"""
Integration tests for the mod builder CLI.
Tests command-line interface functionality and argument parsing.
"""

import os
import json
import zipfile
import tempfile
import shutil
from pathlib import Path

from typer.testing import CliRunner

from ..cli import app
from .helpers import SAMPLE_TREE, write_tree


class TestCLIIntegration:
    """Test CLI integration and command functionality."""

    def setup_method(self):
        """Set up test environment before each test."""
        self.runner = CliRunner()
        self.temp_dir = tempfile.mkdtemp()
        self.original_cwd = os.getcwd()
        os.chdir(self.temp_dir)

        write_tree(Path("Mods/TestMod/Mod"), SAMPLE_TREE)
        self.settings_file = self.create_settings()

    def teardown_method(self):
        """Clean up test environment after each test."""
        os.chdir(self.original_cwd)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def create_settings(self, settings_data: dict = None) -> Path:
        """Create a mod settings file next to the mod sources."""
        if settings_data is None:
            settings_data = {
                "mod_path": "Mod",
                "metadata": {"guid": "abc123", "name": "TestMod", "files": []},
                "cache_bundles": True,
            }

        settings_path = Path("Mods/TestMod/ModBuilderSettings.json")
        settings_path.write_text(json.dumps(settings_data, indent=2))
        return settings_path

    def test_help_command(self):
        result = self.runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "build" in result.output
        assert "check" in result.output
        assert "reference" in result.output

    def test_build_command(self):
        """Test building a mod with the archive bundler."""
        result = self.runner.invoke(app, ["build", str(self.settings_file), "out", "--no-entry-points"])

        assert result.exit_code == 0, result.output
        assert "Built mod" in result.output

        install_dir = Path("out/TestMod")
        with open(install_dir / "ModManifest.json", encoding="utf-8") as f:
            manifest = json.load(f)
        assert [entry["path"] for entry in manifest["files"]] == [
            "Conf/a.json",
            "Localization/b.csv",
            "Scripts/Scripts/c.cs",
            "Libraries/d.dll",
            "Bundles/TestMod_Windows.assetbundle",
        ]

        with zipfile.ZipFile(install_dir / "Bundles/TestMod_Windows.assetbundle") as archive:
            assert archive.namelist() == ["e.png"]

        saved = json.loads(self.settings_file.read_text())
        assert saved["mod_path"] == "Mod"
        assert [entry["path"] for entry in saved["assets"]] == ["Art/e.png", "Conf/a.json", "Localization/b.csv"]
        assert saved["metadata"]["files"][0] == {"path": "Conf/a.json"}

    def test_build_linux_option(self):
        result = self.runner.invoke(app, ["build", str(self.settings_file), "out", "--linux", "--no-entry-points"])

        assert result.exit_code == 0, result.output
        assert Path("out/TestMod/Bundles/TestMod_Linux.assetbundle").exists()
        assert json.loads(self.settings_file.read_text())["last_build_linux"] is True

    def test_build_missing_settings(self):
        result = self.runner.invoke(app, ["build", "missing.json", "out", "--no-entry-points"])

        assert result.exit_code == 1
        assert "Error loading settings" in result.output

    def test_build_missing_mod_directory(self):
        self.create_settings({"mod_path": "Nowhere", "metadata": {"name": "TestMod"}})

        result = self.runner.invoke(app, ["build", str(self.settings_file), "out", "--no-entry-points"])

        assert result.exit_code == 1
        assert "Build failed" in result.output

    def test_check_command(self):
        result = self.runner.invoke(app, ["check", str(self.settings_file), "out"])
        assert result.exit_code == 0
        assert "stale" in result.output

        self.runner.invoke(app, ["build", str(self.settings_file), "out", "--no-entry-points"])

        result = self.runner.invoke(app, ["check", str(self.settings_file), "out"])
        assert result.exit_code == 0
        assert "up to date" in result.output

    def test_reference_names(self):
        result = self.runner.invoke(app, ["reference", "ref.txt", "--names", "wood, stone", "--title", "Items"])

        assert result.exit_code == 0, result.output
        assert Path("ref.txt").read_text() == "Items\n=====\n\nIdentifiers: 2\n\nwood\nstone\n"

    def test_reference_enum(self):
        result = self.runner.invoke(app, ["reference", "ref.txt", "--enum", "mod_builder.pipeline:BuildStep"])

        assert result.exit_code == 0, result.output
        content = Path("ref.txt").read_text()
        assert content.startswith("BuildStep\n")
        assert "DISCOVER = discover" in content

    def test_reference_requires_one_source(self):
        result = self.runner.invoke(app, ["reference", "ref.txt"])

        assert result.exit_code == 1
        assert not Path("ref.txt").exists()

    def test_config_validate(self):
        result = self.runner.invoke(app, ["config", "--validate"])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_config_validate_errors(self):
        Path("mod_builder.toml").write_text('[bundler]\nname = "command"\n')

        result = self.runner.invoke(app, ["config", "--validate"])

        assert result.exit_code == 1
        assert "bundler_command" in result.output

    def test_config_env_vars(self):
        result = self.runner.invoke(app, ["config", "--env-vars"])

        assert result.exit_code == 0
        assert "Set these environment variables" in result.output

    def test_processors_command(self):
        result = self.runner.invoke(app, ["processors", "--no-entry-points"])

        assert result.exit_code == 0

    def test_version_command(self):
        result = self.runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Mod Builder" in result.output
