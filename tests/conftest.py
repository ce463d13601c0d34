from __future__ import annotations

from pathlib import Path

import pytest

from termcast.catalog import CatalogAdapter, InMemoryCatalog


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


@pytest.fixture
def adapter(catalog: InMemoryCatalog) -> CatalogAdapter:
    return CatalogAdapter(catalog)


@pytest.fixture
def runtime_dir(tmp_path: Path) -> Path:
    root = tmp_path / "vendor"
    (root / "js").mkdir(parents=True)
    (root / "css").mkdir(parents=True)
    (root / "js" / "asciinema-player.min.js").write_text("/* player */\n", encoding="utf-8")
    (root / "css" / "asciinema-player.css").write_text("/* styles */\n", encoding="utf-8")
    return root
