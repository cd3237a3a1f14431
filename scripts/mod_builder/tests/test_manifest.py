"""
Unit tests for manifest generation.
"""

import json
import unittest
import tempfile
import shutil
from pathlib import Path

from ..config import ModFile, ModMetadata
from ..processing.manifest import (
    ManifestError,
    build_manifest_files,
    load_mod_manifest,
    write_mod_manifest,
)


class TestModManifest(unittest.TestCase):
    """Test writing the mod manifest."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()
        self.install_dir = self.temp_dir / "TestMod"
        self.install_dir.mkdir()
        self.metadata = ModMetadata(guid="1234", name="TestMod", files=[ModFile("stale.txt")])

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_relative_forward_slash_paths(self):
        files = build_manifest_files(
            [self.install_dir / "Conf" / "a.json", self.install_dir / "Bundles" / "TestMod_Windows.assetbundle"],
            self.install_dir,
        )

        self.assertEqual([f.path for f in files], ["Conf/a.json", "Bundles/TestMod_Windows.assetbundle"])

    def test_outside_install_directory(self):
        with self.assertRaises(ManifestError):
            build_manifest_files([self.temp_dir / "elsewhere.txt"], self.install_dir)

    def test_write_replaces_file_list(self):
        manifest = [self.install_dir / "Conf/a.json", self.install_dir / "Scripts/c.cs"]

        manifest_path = write_mod_manifest(self.metadata, manifest, self.install_dir)

        self.assertEqual(manifest_path, self.install_dir / "ModManifest.json")
        self.assertEqual([f.path for f in self.metadata.files], ["Conf/a.json", "Scripts/c.cs"])

        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["guid"], "1234")
        self.assertEqual(data["name"], "TestMod")
        self.assertEqual(data["files"], [{"path": "Conf/a.json"}, {"path": "Scripts/c.cs"}])

    def test_write_is_deterministic(self):
        manifest = [self.install_dir / "Conf/a.json"]

        first = write_mod_manifest(self.metadata, manifest, self.install_dir).read_bytes()
        second = write_mod_manifest(self.metadata, manifest, self.install_dir).read_bytes()

        self.assertEqual(first, second)

    def test_load_round_trip(self):
        manifest_path = write_mod_manifest(self.metadata, [self.install_dir / "Conf/a.json"], self.install_dir)

        loaded = load_mod_manifest(manifest_path)

        self.assertEqual(loaded, self.metadata)

    def test_custom_file_name(self):
        manifest_path = write_mod_manifest(self.metadata, [], self.install_dir, "manifest.json")

        self.assertEqual(manifest_path.name, "manifest.json")
        self.assertEqual(self.metadata.files, [])


if __name__ == '__main__':
    unittest.main()
