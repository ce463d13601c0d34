"""Build catalog contract and the registration policy applied on top of it."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Protocol, runtime_checkable


logger = logging.getLogger(__name__)

PACKAGE_NAME = "termcast"


class EntryKind(str, Enum):
    """Kinds of files tracked by the build catalog."""

    ASSET = "asset"
    PARTIAL = "partial"


class RegistrationOutcome(Enum):
    """Result of a registration request for a single logical path."""

    ADDED = "added"
    SKIPPED = "skipped"
    REPLACED = "replaced"


@runtime_checkable
class ContentSource(Protocol):
    """Byte provider bound to a catalog entry."""

    def read(self) -> bytes: ...


@dataclass(frozen=True, slots=True)
class BytesSource:
    """Eagerly materialised content."""

    data: bytes

    def read(self) -> bytes:
        return self.data


@dataclass(frozen=True, slots=True)
class FileSource:
    """Content backed by a file that is only opened when read."""

    path: Path

    def read(self) -> bytes:
        return self.path.read_bytes()


@dataclass(slots=True)
class CatalogEntry:
    """A file destined for the generated site."""

    path: str
    kind: EntryKind
    source: ContentSource
    output_path: str | None = None
    origin: str | None = None
    stat: os.stat_result | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.output_path is None:
            self.output_path = self.path

    def read(self) -> bytes:
        return self.source.read()


@runtime_checkable
class BuildCatalog(Protocol):
    """Host-owned, build-scoped collection of catalog entries."""

    def find(self, path: str, kind: EntryKind) -> CatalogEntry | None: ...

    def add(self, entry: CatalogEntry) -> None: ...

    def replace(self, entry: CatalogEntry) -> None: ...


class InMemoryCatalog:
    """Dictionary-backed catalog used outside of a hosting site generator."""

    def __init__(self) -> None:
        self._entries: dict[tuple[EntryKind, str], CatalogEntry] = {}

    def find(self, path: str, kind: EntryKind) -> CatalogEntry | None:
        return self._entries.get((kind, path))

    def add(self, entry: CatalogEntry) -> None:
        self._entries[(entry.kind, entry.path)] = entry

    def replace(self, entry: CatalogEntry) -> None:
        existing = self._entries.get((entry.kind, entry.path))
        if existing is None:
            self.add(entry)
            return
        existing.source = entry.source
        existing.output_path = entry.output_path
        existing.origin = entry.origin
        existing.stat = None

    def entries(self, kind: EntryKind | None = None) -> list[CatalogEntry]:
        """Return registered entries, optionally restricted to ``kind``."""
        return [
            entry
            for (entry_kind, _), entry in self._entries.items()
            if kind is None or entry_kind is kind
        ]

    def write(self, output_dir: Path, kind: EntryKind = EntryKind.ASSET) -> list[Path]:
        """Materialise every entry of ``kind`` below ``output_dir``."""
        written: list[Path] = []
        for entry in self.entries(kind):
            destination = output_dir / (entry.output_path or entry.path)
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(entry.read())
            entry.stat = destination.stat()
            written.append(destination)
        return written

    def __contains__(self, path: object) -> bool:
        return any(entry_path == path for _, entry_path in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(list(self._entries.values()))


class CatalogAdapter:
    """Apply the check-then-insert policy to a host catalog.

    A path is written once. A conflicting registration is skipped unless the
    caller explicitly asks to overwrite, in which case the byte source is
    swapped and any cached stat dropped.
    """

    def __init__(
        self,
        catalog: BuildCatalog,
        *,
        logger_obj: logging.Logger | None = None,
        owner: str = PACKAGE_NAME,
    ) -> None:
        self._catalog = catalog
        self._logger = logger_obj or logger
        self._lock = RLock()
        self.owner = owner

    @property
    def catalog(self) -> BuildCatalog:
        return self._catalog

    @property
    def lock(self) -> RLock:
        """Lock guarding existence checks followed by registration."""
        return self._lock

    def exists(self, path: str, kind: EntryKind = EntryKind.ASSET) -> bool:
        with self._lock:
            return self._catalog.find(path, kind) is not None

    def owns(self, path: str, kind: EntryKind = EntryKind.ASSET) -> bool:
        """Return whether ``path`` was registered by this adapter's owner."""
        with self._lock:
            entry = self._catalog.find(path, kind)
        return entry is not None and entry.origin == self.owner

    def register(self, entry: CatalogEntry, *, overwrite: bool = False) -> RegistrationOutcome:
        """Insert ``entry`` unless its logical path is already taken."""
        if entry.origin is None:
            entry.origin = self.owner
        with self._lock:
            existing = self._catalog.find(entry.path, entry.kind)
            if existing is None:
                self._catalog.add(entry)
                return RegistrationOutcome.ADDED
            if not overwrite:
                self._logger.info(
                    "The following file already exists in your site: %s, skipping", entry.path
                )
                return RegistrationOutcome.SKIPPED
            self._logger.warning(
                "Please remove the following file from your site since it is managed by %s: %s",
                self.owner,
                entry.path,
            )
            self._catalog.replace(entry)
            return RegistrationOutcome.REPLACED


__all__ = [
    "PACKAGE_NAME",
    "BuildCatalog",
    "BytesSource",
    "CatalogAdapter",
    "CatalogEntry",
    "ContentSource",
    "EntryKind",
    "FileSource",
    "InMemoryCatalog",
    "RegistrationOutcome",
]
