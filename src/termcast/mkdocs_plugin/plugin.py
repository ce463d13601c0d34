"""MkDocs plugin wiring recording publication into the build lifecycle."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from jinja2 import ChoiceLoader, Environment
from mkdocs.config import config_options
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.exceptions import PluginError
from mkdocs.plugins import BasePlugin
from mkdocs.structure.files import Files
from mkdocs.structure.pages import Page
from mkdocs.utils import get_relative_url, log

from termcast.catalog import CatalogAdapter
from termcast.exceptions import TermcastError, UnknownOptionError
from termcast.markdown import AsciinemaExtension
from termcast.options import EmbedOptions, validate_options
from termcast.runtime import RuntimeRegistrar

from .catalog import MkDocsCatalog


def _page_url_resolver(page_url: str) -> Callable[[str], str]:
    def url_for(path: str) -> str:
        return get_relative_url(path, page_url or ".")

    return url_for


class TermcastPlugin(BasePlugin):
    """MkDocs plugin embedding asciinema recordings in rendered pages."""

    config_scheme = (
        ("rows", config_options.Type((int, type(None)), default=None)),
        ("cols", config_options.Type((int, type(None)), default=None)),
        ("autoPlay", config_options.Type((bool, type(None)), default=None)),
    )

    def __init__(self) -> None:
        self._defaults = EmbedOptions()
        self._catalog: MkDocsCatalog | None = None
        self._extension: AsciinemaExtension | None = None

    def load_config(
        self, options: dict[str, Any], config_file_path: str | None = None
    ) -> tuple[Any, Any]:
        # Unknown keys abort the build before MkDocs wires any event.
        try:
            validate_options(options)
        except UnknownOptionError as exc:
            raise PluginError(str(exc)) from exc
        return super().load_config(options, config_file_path)

    # -- MkDocs lifecycle -------------------------------------------------

    def on_config(self, config: MkDocsConfig) -> MkDocsConfig:
        try:
            self._defaults = EmbedOptions.from_mapping(self.config)
        except TermcastError as exc:
            raise PluginError(f"Invalid termcast configuration: {exc}") from exc
        self._catalog = None
        self._extension = None
        return config

    def on_files(self, files: Files, config: MkDocsConfig) -> Files:
        self._catalog = MkDocsCatalog(files, config)
        adapter = CatalogAdapter(self._catalog, logger_obj=log)
        try:
            RuntimeRegistrar(adapter).ensure_runtime_assets(environment=config.extra)
        except TermcastError as exc:
            raise PluginError(f"Unable to publish the asciinema player: {exc}") from exc
        self._install_extension(adapter, config)
        return files

    def on_page_markdown(
        self,
        markdown: str,
        page: Page,
        config: MkDocsConfig,
        files: Files,  # noqa: ARG002 - required by MkDocs
    ) -> str:
        if self._extension is not None:
            self._extension.bind_page(
                url_for=_page_url_resolver(page.url),
                attributes=dict(page.meta or {}),
            )
        return markdown

    def on_env(
        self,
        env: Environment,
        config: MkDocsConfig,
        files: Files,  # noqa: ARG002 - required by MkDocs
    ) -> Environment:
        if self._catalog is not None:
            # Theme templates stay first so user overrides win.
            env.loader = ChoiceLoader([env.loader, self._catalog.partial_loader()])
        return env

    # -- Helpers ----------------------------------------------------------

    def _install_extension(self, adapter: CatalogAdapter, config: MkDocsConfig) -> None:
        self._extension = AsciinemaExtension(
            catalog=adapter,
            attributes=dict(config.extra or {}),
            **self._defaults.as_player_options(),
        )
        extensions = [
            extension
            for extension in config.markdown_extensions
            if not isinstance(extension, AsciinemaExtension)
        ]
        extensions.append(self._extension)
        config.markdown_extensions = extensions


__all__ = ["TermcastPlugin"]
