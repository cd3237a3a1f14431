"""
Unit tests for the preprocessor extension point.
"""

import unittest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch, MagicMock

from ..config import ModBuilderSettings
from ..processors import base
from ..processors import (
    BuildProcessor,
    ProcessorRegistry,
    run_preprocessors,
)


class AppendingProcessor(BuildProcessor):
    """Writes a generated file into the mod and adds it to the asset list."""

    def execute(self, settings, install_directory, asset_paths):
        generated = settings.mod_directory / "Generated.txt"
        generated.write_text("generated")
        asset_paths.append(generated)


class DroppingProcessor(BuildProcessor):

    def execute(self, settings, install_directory, asset_paths):
        asset_paths[:] = [path for path in asset_paths if path.suffix != ".txt"]


class BrokenProcessor(BuildProcessor):

    def __init__(self):
        raise RuntimeError("missing dependency")

    def execute(self, settings, install_directory, asset_paths):
        pass


class FailingProcessor(BuildProcessor):

    def execute(self, settings, install_directory, asset_paths):
        raise RuntimeError("processor failed")


class TestProcessorRegistry(unittest.TestCase):
    """Test processor registration and loading."""

    def setUp(self):
        self.registry = ProcessorRegistry()

    def test_register_and_list(self):
        self.registry.register_processor_class("b", AppendingProcessor)
        self.registry.register_processor("a", DroppingProcessor())

        self.assertEqual(self.registry.list_registered_processors(), ["a", "b"])

        self.registry.remove_processor("a")
        self.assertEqual(self.registry.list_registered_processors(), ["b"])

        self.registry.clear_processors()
        self.assertEqual(self.registry.list_registered_processors(), [])

    def test_register_rejects_non_processors(self):
        with self.assertRaises(TypeError):
            self.registry.register_processor("bad", object())

    def test_broken_processor_is_skipped(self):
        self.registry.register_processor_class("broken", BrokenProcessor)
        self.registry.register_processor_class("not_a_processor", dict)
        self.registry.register_processor_class("ok", DroppingProcessor)

        with self.assertLogs(base.logger, level="WARNING"):
            processors = self.registry.create_processors()

        self.assertEqual([type(p) for p in processors], [DroppingProcessor])

    def test_instances_run_before_classes(self):
        instance = AppendingProcessor()
        self.registry.register_processor_class("class", DroppingProcessor)
        self.registry.register_processor("instance", instance)

        processors = self.registry.create_processors()

        self.assertIs(processors[0], instance)
        self.assertIsInstance(processors[1], DroppingProcessor)

    def test_load_entry_points(self):
        good = MagicMock()
        good.name = "good"
        good.load.return_value = AppendingProcessor
        bad = MagicMock()
        bad.name = "bad"
        bad.load.side_effect = ImportError("no module")

        with patch.object(base.metadata, "entry_points", return_value=[good, bad]) as entry_points:
            loaded = self.registry.load_entry_points()

        entry_points.assert_called_once_with(group="mod_builder.processors")
        self.assertEqual(loaded, 1)
        self.assertEqual(self.registry.list_registered_processors(), ["good"])


class TestRunPreprocessors(unittest.TestCase):
    """Test running processors over the shared asset list."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()
        self.mod_dir = self.temp_dir / "Mod"
        self.mod_dir.mkdir()
        (self.mod_dir / "notes.txt").write_text("notes")
        (self.mod_dir / "e.png").write_text("png")
        self.settings = ModBuilderSettings(mod_path=str(self.mod_dir))
        self.registry = ProcessorRegistry()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_processors_mutate_list_in_place(self):
        asset_paths = [self.mod_dir / "e.png", self.mod_dir / "notes.txt"]
        original = asset_paths
        self.registry.register_processor("drop", DroppingProcessor())

        count = run_preprocessors(self.settings, self.temp_dir / "out", asset_paths, self.registry)

        self.assertEqual(count, 1)
        self.assertIs(asset_paths, original)
        self.assertEqual(asset_paths, [self.mod_dir / "e.png"])

    def test_processor_can_add_files(self):
        asset_paths = []
        self.registry.register_processor("append", AppendingProcessor())

        run_preprocessors(self.settings, self.temp_dir / "out", asset_paths, self.registry)

        self.assertEqual(asset_paths, [self.mod_dir / "Generated.txt"])
        self.assertTrue((self.mod_dir / "Generated.txt").exists())

    def test_execute_errors_propagate(self):
        self.registry.register_processor("fail", FailingProcessor())

        with self.assertRaises(RuntimeError):
            run_preprocessors(self.settings, self.temp_dir / "out", [], self.registry)

    def test_no_processors(self):
        self.assertEqual(run_preprocessors(self.settings, self.temp_dir / "out", [], self.registry), 0)


if __name__ == '__main__':
    unittest.main()
