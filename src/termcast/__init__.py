"""Content-addressed asciinema embeds for generated documentation sites."""

from __future__ import annotations

from .catalog import (
    BuildCatalog,
    BytesSource,
    CatalogAdapter,
    CatalogEntry,
    EntryKind,
    FileSource,
    InMemoryCatalog,
    RegistrationOutcome,
)
from .exceptions import (
    AssetMissingError,
    ConfigurationError,
    InvalidOptionError,
    TermcastError,
    UnknownOptionError,
)
from .identifiers import derive_token
from .markdown import AsciinemaExtension
from .markup import EmbedMarkupBuilder, RenderedBlock, coerce_attributes
from .options import EmbedOptions, resolve_options, validate_options
from .publisher import RecordingPublisher, recording_path
from .runtime import RuntimeRegistrar
from .version import get_version


__version__ = get_version()


def setup(options: dict | None = None) -> EmbedOptions:
    """Validate site-wide options and return the resolved player defaults.

    Unknown keys raise :class:`UnknownOptionError` before anything is registered.
    """
    options = dict(options or {})
    validate_options(options)
    return EmbedOptions.from_mapping(options)


__all__ = [
    "AsciinemaExtension",
    "AssetMissingError",
    "BuildCatalog",
    "BytesSource",
    "CatalogAdapter",
    "CatalogEntry",
    "ConfigurationError",
    "EmbedMarkupBuilder",
    "EmbedOptions",
    "EntryKind",
    "FileSource",
    "InMemoryCatalog",
    "InvalidOptionError",
    "RecordingPublisher",
    "RegistrationOutcome",
    "RenderedBlock",
    "RuntimeRegistrar",
    "TermcastError",
    "UnknownOptionError",
    "__version__",
    "coerce_attributes",
    "derive_token",
    "get_version",
    "recording_path",
    "resolve_options",
    "setup",
    "validate_options",
]
