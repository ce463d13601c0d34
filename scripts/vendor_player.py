#!/usr/bin/env python3
"""Download the pinned asciinema-player release into the package data directory.

The wheel build runs :func:`ensure_vendored` through ``hatch_build.py``, so the
files only need fetching by hand to refresh them (``--force``).
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from urllib.request import urlopen


ROOT = Path(__file__).resolve().parents[1]
VENDOR_DIR = ROOT / "src" / "termcast" / "data" / "vendor"
PLAYER_VERSION = "3.8.2"
RELEASE_URL = (
    f"https://github.com/asciinema/asciinema-player/releases/download/v{PLAYER_VERSION}/"
)
FILES = {
    "asciinema-player.min.js": Path("js") / "asciinema-player.min.js",
    "asciinema-player.css": Path("css") / "asciinema-player.css",
}


def download_bytes(url: str) -> bytes:
    with urlopen(url, timeout=60) as response:
        return response.read()


def ensure_vendored(vendor_dir: Path = VENDOR_DIR, *, force: bool = False) -> list[Path]:
    """Fetch missing runtime files into ``vendor_dir`` and return the written paths."""
    written: list[Path] = []
    for name, relative in FILES.items():
        target = vendor_dir / relative
        if target.is_file() and not force:
            continue
        payload = download_bytes(RELEASE_URL + name)
        if not payload:
            raise RuntimeError(f"Empty download for {RELEASE_URL + name}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
        written.append(target)
    return written


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--force", action="store_true", help="Download even if present.")
    args = parser.parse_args(argv)

    for target in ensure_vendored(force=args.force):
        print(f"{target.name}: {target.stat().st_size} bytes -> {target.relative_to(ROOT)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
