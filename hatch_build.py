"""Bundle the asciinema-player runtime into every build of the package."""

from __future__ import annotations

from pathlib import Path
import runpy
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class PlayerRuntimeBuildHook(BuildHookInterface):
    """Fetch the pinned player files before the wheel is assembled."""

    PLUGIN_NAME = "custom"

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        root = Path(self.root)
        vendor = runpy.run_path(str(root / "scripts" / "vendor_player.py"))
        for path in vendor["ensure_vendored"](root / "src" / "termcast" / "data" / "vendor"):
            self.app.display_info(f"Vendored {path.relative_to(root)}")
