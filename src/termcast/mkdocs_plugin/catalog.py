"""Build catalog backed by MkDocs' file collection and theme directories."""

from __future__ import annotations

from pathlib import Path

from jinja2 import DictLoader
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.structure.files import File, Files

from termcast.catalog import BytesSource, CatalogEntry, EntryKind, FileSource


class MkDocsCatalog:
    """Expose MkDocs ``Files`` (assets) and theme templates (partials) as a catalog.

    Assets registered here are appended to ``Files`` so MkDocs copies them at
    write time; file-backed sources are never read beforehand. Partials are
    kept aside and served through :meth:`partial_loader`.
    """

    def __init__(self, files: Files, config: MkDocsConfig) -> None:
        self._files = files
        self._config = config
        self._registered: dict[tuple[EntryKind, str], CatalogEntry] = {}

    @property
    def files(self) -> Files:
        return self._files

    def find(self, path: str, kind: EntryKind) -> CatalogEntry | None:
        registered = self._registered.get((kind, path))
        if registered is not None:
            return registered

        if kind is EntryKind.PARTIAL:
            template = self._theme_template(path)
            if template is None:
                return None
            return CatalogEntry(path=path, kind=kind, source=FileSource(template))

        existing = self._files.get_file_from_path(path)
        if existing is None:
            return None
        return self._describe(existing)

    def add(self, entry: CatalogEntry) -> None:
        if entry.kind is EntryKind.ASSET:
            self._files.append(self._to_file(entry))
        self._registered[(entry.kind, entry.path)] = entry

    def replace(self, entry: CatalogEntry) -> None:
        if entry.kind is EntryKind.ASSET:
            existing = self._files.get_file_from_path(entry.path)
            if existing is not None:
                self._files.remove(existing)
        entry.stat = None
        self.add(entry)

    def partials(self) -> dict[str, str]:
        """Return the registered partial templates keyed by template name."""
        return {
            path: entry.read().decode("utf-8")
            for (kind, path), entry in self._registered.items()
            if kind is EntryKind.PARTIAL
        }

    def partial_loader(self) -> DictLoader:
        return DictLoader(self.partials())

    def _to_file(self, entry: CatalogEntry) -> File:
        if isinstance(entry.source, FileSource):
            file = File.generated(self._config, entry.path, abs_src_path=str(entry.source.path))
        else:
            file = File.generated(self._config, entry.path, content=entry.read())
        if entry.output_path and entry.output_path != entry.path:
            file.dest_uri = entry.output_path
        return file

    def _describe(self, file: File) -> CatalogEntry:
        if file.abs_src_path:
            source: FileSource | BytesSource = FileSource(Path(file.abs_src_path))
        else:
            source = BytesSource(file.content_bytes)
        return CatalogEntry(
            path=file.src_uri,
            kind=EntryKind.ASSET,
            source=source,
            output_path=file.dest_uri,
        )

    def _theme_template(self, path: str) -> Path | None:
        theme = self._config.theme
        for directory in getattr(theme, "dirs", []):
            candidate = Path(directory) / path
            if candidate.is_file():
                return candidate
        return None


__all__ = ["MkDocsCatalog"]
