"""Register the player runtime and its template partials once per build."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
import logging
from pathlib import Path
import posixpath
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .catalog import (
    BytesSource,
    CatalogAdapter,
    CatalogEntry,
    EntryKind,
    FileSource,
    RegistrationOutcome,
)
from .exceptions import AssetMissingError


logger = logging.getLogger(__name__)

RUNTIME_DIR = Path(__file__).resolve().parent / "data" / "vendor"
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

PROVIDER_ENV_KEY = "asciinema_provider"
PROVIDER_NAME = "asciinema"


@dataclass(frozen=True, slots=True)
class RuntimeFile:
    """A vendored player file published verbatim."""

    asset_dir: str
    basename: str

    @property
    def path(self) -> str:
        return f"{self.asset_dir}/vendor/{self.basename}"


@dataclass(frozen=True, slots=True)
class PartialTemplate:
    """A page template fragment including the runtime."""

    path: str
    stem: str


RUNTIME_STYLE = RuntimeFile("css", "asciinema-player.css")
RUNTIME_SCRIPT = RuntimeFile("js", "asciinema-player.min.js")
RUNTIME_FILES = (RUNTIME_STYLE, RUNTIME_SCRIPT)

SCRIPTS_PARTIAL = PartialTemplate("partials/asciinema-scripts.html", "asciinema-scripts")
STYLES_PARTIAL = PartialTemplate("partials/asciinema-styles.html", "asciinema-styles")
PARTIALS = (SCRIPTS_PARTIAL, STYLES_PARTIAL)


def output_location(output_root: str, path: str) -> str:
    """Join ``path`` below ``output_root`` using POSIX separators."""
    if not output_root:
        return path
    return posixpath.join(output_root.strip("/"), path)


class RuntimeRegistrar:
    """Populate the catalog with the shared player runtime."""

    def __init__(
        self,
        catalog: CatalogAdapter,
        *,
        runtime_dir: Path | None = None,
        template_dir: Path | None = None,
    ) -> None:
        self._catalog = catalog
        self._runtime_dir = Path(runtime_dir or RUNTIME_DIR)
        self._templates = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def ensure_runtime_assets(
        self,
        output_root: str = "",
        environment: MutableMapping[str, Any] | None = None,
        *,
        overwrite: bool = False,
    ) -> dict[str, RegistrationOutcome]:
        """Register runtime files and partials, returning the outcome per path.

        Calling this again within the same build leaves the catalog unchanged.
        """
        if environment is not None:
            environment[PROVIDER_ENV_KEY] = PROVIDER_NAME

        outcomes: dict[str, RegistrationOutcome] = {}
        with self._catalog.lock:
            for runtime_file in RUNTIME_FILES:
                outcomes[runtime_file.path] = self._register_runtime_file(
                    runtime_file, output_root, overwrite=overwrite
                )
            context = {
                "script_path": output_location(output_root, RUNTIME_SCRIPT.path),
                "style_path": output_location(output_root, RUNTIME_STYLE.path),
            }
            for partial in PARTIALS:
                outcomes[partial.path] = self._register_partial(partial, context)
        return outcomes

    def _register_runtime_file(
        self, runtime_file: RuntimeFile, output_root: str, *, overwrite: bool
    ) -> RegistrationOutcome:
        if self._catalog.owns(runtime_file.path, EntryKind.ASSET):
            return RegistrationOutcome.SKIPPED

        source_path = self._runtime_dir / runtime_file.asset_dir / runtime_file.basename
        if not source_path.is_file():
            raise AssetMissingError(
                f"Player runtime file '{runtime_file.basename}' is missing from {self._runtime_dir}."
            )
        return self._catalog.register(
            CatalogEntry(
                path=runtime_file.path,
                kind=EntryKind.ASSET,
                source=FileSource(source_path),
                output_path=output_location(output_root, runtime_file.path),
            ),
            overwrite=overwrite,
        )

    def _register_partial(
        self, partial: PartialTemplate, context: dict[str, str]
    ) -> RegistrationOutcome:
        # A user partial with the same name always wins.
        if self._catalog.exists(partial.path, EntryKind.PARTIAL):
            logger.debug("Partial %s already provided, leaving it untouched.", partial.path)
            return RegistrationOutcome.SKIPPED

        rendered = self._templates.get_template(partial.path).render(**context)
        return self._catalog.register(
            CatalogEntry(
                path=partial.path,
                kind=EntryKind.PARTIAL,
                source=BytesSource(rendered.encode("utf-8")),
            )
        )


__all__ = [
    "PARTIALS",
    "PROVIDER_ENV_KEY",
    "PROVIDER_NAME",
    "RUNTIME_DIR",
    "RUNTIME_FILES",
    "RUNTIME_SCRIPT",
    "RUNTIME_STYLE",
    "SCRIPTS_PARTIAL",
    "STYLES_PARTIAL",
    "TEMPLATE_DIR",
    "PartialTemplate",
    "RuntimeFile",
    "RuntimeRegistrar",
    "output_location",
]
