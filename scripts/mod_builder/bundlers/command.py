"""
Command bundler: delegates bundle encoding to an external executable.
"""

import os
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import AssetBundler, BuildTarget, BundleResult, BundlerError

logger = logging.getLogger(__name__)


class CommandBundler(AssetBundler):
    """
    Runs an external bundle builder once per target.

    The ``command`` config entry is an argument list. ``{target}``,
    ``{build_target}``, ``{output_dir}``, ``{bundle_name}`` and
    ``{asset_list}`` are substituted in each argument; ``{asset_list}`` is a
    temporary file with one asset path per line. A non-zero exit code is a
    failed build. Every file the command leaves in the output folder whose
    name starts with the bundle name is reported as produced.
    """

    name = "command"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.command: List[str] = list(self.config.get("command", []))
        self.timeout: Optional[float] = self.config.get("timeout")
        if not self.command:
            raise BundlerError("No bundler command configured", self.name)

    def build_bundles(self, target: BuildTarget, output_dir: Path, bundle_name: str,
                      assets: List[Path]) -> BundleResult:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        fd, asset_list = tempfile.mkstemp(prefix="bundle-assets-", suffix=".txt")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write("\n".join(str(asset) for asset in assets))

            values = {
                "target": target.name,
                "build_target": target.build_target,
                "output_dir": str(output_dir),
                "bundle_name": bundle_name,
                "asset_list": asset_list,
            }
            cmd = [arg.format(**values) for arg in self.command]
            logger.info(f"Running bundler: {' '.join(cmd)}")

            try:
                result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
            except (OSError, subprocess.TimeoutExpired) as e:
                return BundleResult(success=False, message=f"Bundler command failed to run: {e}")
        finally:
            Path(asset_list).unlink(missing_ok=True)

        if result.returncode != 0:
            return BundleResult(
                success=False,
                message=f"Bundler exited with {result.returncode}: {result.stderr.strip()}",
            )

        produced = sorted(
            path.resolve() for path in output_dir.iterdir()
            if path.is_file() and path.name.startswith(bundle_name)
        )
        if not produced:
            return BundleResult(success=False, message=f"Bundler produced no {bundle_name}")

        return BundleResult(success=True, files=produced, message=result.stdout.strip())
