"""Hatchling build hook to embed git commit at build time."""

import subprocess
from pathlib import Path

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class CustomBuildHook(BuildHookInterface):
    """Build hook to capture git commit hash."""

    def initialize(self, version, build_data):
        """Write the short commit hash to dropapi/_version.txt, if in a git checkout."""
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--short=7", "HEAD"],
                capture_output=True,
                text=True,
                timeout=5,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            print(f"Warning: Could not capture git commit: {e}")
            return

        commit = result.stdout.strip() if result.returncode == 0 else ""
        if commit:
            version_file = Path(self.root) / "dropapi" / "_version.txt"
            version_file.write_text(commit)
            build_data["artifacts"].append("dropapi/_version.txt")
            print(f"Embedded git commit: {commit}")
