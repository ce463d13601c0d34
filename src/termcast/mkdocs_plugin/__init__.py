"""MkDocs integration for termcast."""

from __future__ import annotations

from .catalog import MkDocsCatalog
from .plugin import TermcastPlugin


__all__ = ["MkDocsCatalog", "TermcastPlugin"]
