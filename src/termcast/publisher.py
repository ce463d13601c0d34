"""Publish recordings once per build, keyed by their content."""

from __future__ import annotations

import logging

from .catalog import BytesSource, CatalogAdapter, CatalogEntry, EntryKind
from .identifiers import derive_token


logger = logging.getLogger(__name__)

RECORDINGS_DIR = "_asciinema"
RECORDING_SUFFIX = ".cast"


def recording_path(token: str) -> str:
    """Return the logical catalog path of the recording identified by ``token``."""
    return f"{RECORDINGS_DIR}/{token}{RECORDING_SUFFIX}"


class RecordingPublisher:
    """Register recordings in the build catalog, skipping already published content."""

    def __init__(self, catalog: CatalogAdapter) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> CatalogAdapter:
        return self._catalog

    def publish(self, content: bytes | str) -> str:
        """Publish ``content`` and return its token."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        token = derive_token(content)
        path = recording_path(token)

        with self._catalog.lock:
            if self._catalog.exists(path, EntryKind.ASSET):
                logger.debug("Recording %s already published, reusing it.", path)
                return token
            self._catalog.register(
                CatalogEntry(
                    path=path,
                    kind=EntryKind.ASSET,
                    source=BytesSource(content),
                    output_path=path,
                )
            )
        return token


__all__ = ["RECORDINGS_DIR", "RECORDING_SUFFIX", "RecordingPublisher", "recording_path"]
