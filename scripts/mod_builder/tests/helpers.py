"""
Shared fixtures for mod builder tests.
"""

import json
from pathlib import Path
from typing import Dict, List

from ..bundlers.base import AssetBundler, BuildTarget, BundleResult


SAMPLE_TREE = {
    "Conf/a.json": '{"enabled": true}',
    "Localization/b.csv": "Key,English\nhello,Hello\n",
    "Scripts/c.cs": "public class C {}\n",
    "lib/d.dll": "MZ-native",
    "Art/e.png": "PNG-bytes",
}


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create files (relative path -> text content) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


class RecordingBundler(AssetBundler):
    """Bundler collaborator that records its calls and writes a small bundle file."""

    name = "recording"

    def __init__(self, fail_on: str = None, log_file: str = "buildlogtep.json"):
        super().__init__({})
        self.fail_on = fail_on
        self.log_file = log_file
        self.calls: List[dict] = []

    def build_bundles(self, target: BuildTarget, output_dir: Path, bundle_name: str,
                      assets: List[Path]) -> BundleResult:
        self.calls.append({
            "target": target.name,
            "output_dir": Path(output_dir),
            "bundle_name": bundle_name,
            "assets": [Path(asset) for asset in assets],
        })

        if target.name == self.fail_on:
            return BundleResult(success=False, message=f"{target.name} build failed")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        bundle_path = output_dir / bundle_name
        bundle_path.write_text("\n".join(sorted(Path(asset).name for asset in assets)))
        (output_dir / self.log_file).write_text(json.dumps({"bundle": bundle_name}))

        return BundleResult(success=True, files=[bundle_path.resolve()], message="ok")


def manifest_paths(manifest_file: Path) -> List[str]:
    with open(manifest_file, encoding="utf-8") as f:
        return [entry["path"] for entry in json.load(f)["files"]]
